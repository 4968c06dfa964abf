from go_detector.cli.app import app

app()
