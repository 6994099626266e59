"""puml2png - render PlantUML sources to images and keep a directory in sync."""

__version__ = "0.1.0"
