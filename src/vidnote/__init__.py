"""vidnote: mark moments in a video, annotate them, export the timeline."""

__version__ = "0.1.0"
