from .repository import UserRepository
