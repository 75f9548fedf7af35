"""易宿酒店预订平台后端"""

__version__ = "1.0.0"
