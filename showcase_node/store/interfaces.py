from abc import ABC, abstractmethod
from typing import Optional

from showcase_node.entities.project import Project
from showcase_node.entities.user import User


class DataStore(ABC):
    """Key-based get/put of Users and Projects. No transactions are assumed.

    `get_*` returns a detached copy; changes are only visible after `put_*`.
    """

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def put_user(self, user: User):
        pass

    @abstractmethod
    def list_users(self) -> list[User]:
        pass

    @abstractmethod
    def get_project(self, project_id: str) -> Optional[Project]:
        pass

    @abstractmethod
    def put_project(self, project: Project):
        pass

    @abstractmethod
    def list_projects(self) -> list[Project]:
        pass

    @abstractmethod
    def projects_by_owner(self, owner_id: str) -> list[Project]:
        pass
