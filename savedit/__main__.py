from savedit.cli import run


run()
