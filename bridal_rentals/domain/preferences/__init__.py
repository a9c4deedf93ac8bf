from .repository import UserPreferencesRepository, DEFAULT_WIDGETS, default_columns
