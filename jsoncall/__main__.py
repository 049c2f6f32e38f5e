"""
Entry point for running jsoncall as a module: python -m jsoncall
"""

from jsoncall.cli.commands import app

if __name__ == "__main__":
    app()
