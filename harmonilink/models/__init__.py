from .dto import MixtapePayload, SavedMixtape, SongPayload

__all__ = ["MixtapePayload", "SavedMixtape", "SongPayload"]
