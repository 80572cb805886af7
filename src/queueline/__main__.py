from queueline.cli.app import app

app()
