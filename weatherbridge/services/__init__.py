from .bridge import WeatherBridge

__all__ = ["WeatherBridge"]
