from feedrelay.cli import app

app()
