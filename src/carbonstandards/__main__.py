from carbonstandards.cli import app

app(prog_name="carbonstandards")
