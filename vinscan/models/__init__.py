# vinscan/models/__init__.py

"""
This __init__.py file ensures that models and database components are available
for import throughout the application. It helps keep the codebase modular
and consistent by centralizing model imports.
"""

from vinscan.database import Base

# Models from user.py
from .user import User

# Models from asset.py
from .asset import Asset

# Models from record.py
from .record import Record
