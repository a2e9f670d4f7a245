from . import contact, auth, skin_analysis, media

__all__ = ["contact", "auth", "skin_analysis", "media"]
