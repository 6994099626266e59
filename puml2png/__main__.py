from puml2png.cli import app

app()
