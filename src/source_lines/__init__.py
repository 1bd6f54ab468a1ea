"""Line-oriented source code with SCM and coverage metadata."""

__version__ = "0.1.0"
