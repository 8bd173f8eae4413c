from polyclinic.config.settings import ALL_SERVICES, Settings, get_settings

__all__ = ["ALL_SERVICES", "Settings", "get_settings"]
