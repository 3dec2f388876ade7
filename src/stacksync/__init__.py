"""Keep a local sync root and a Docker Compose stack in step through Unison."""

__version__ = "0.3.0"
__app_name__ = "stacksync"
