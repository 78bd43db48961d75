from taskapp.config.settings import settings

__all__ = ["settings"]
