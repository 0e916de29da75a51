from truckqr import db

# Import models after db is defined
from .truck import Truck
from .document import Document
from .photo import Photo
from .report import Report

# Export models
__all__ = ['db', 'Truck', 'Document', 'Photo', 'Report']
