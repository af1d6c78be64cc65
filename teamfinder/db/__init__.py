from .mongodb import MongoDatabase

__all__ = ["MongoDatabase"]
