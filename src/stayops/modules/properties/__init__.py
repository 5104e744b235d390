from stayops.modules.properties.properties import PropertiesManager, PropertyDetail

__all__ = ["PropertiesManager", "PropertyDetail"]
