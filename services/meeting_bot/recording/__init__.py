from .transcoder import Transcoder

__all__ = ["Transcoder"]
