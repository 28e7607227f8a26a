import copy
import threading
from typing import Dict, Optional

from showcase_node.entities.project import Project
from showcase_node.entities.user import User
from showcase_node.store.interfaces import DataStore


class InMemoryDataStore(DataStore):
    def __init__(self):
        # In-memory storage, keyed by id. Records are copied in and out.
        self._users: Dict[str, User] = {}
        self._projects: Dict[str, Project] = {}
        self._lock = threading.Lock()

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return copy.deepcopy(user) if user else None

    def put_user(self, user: User):
        with self._lock:
            self._users[user.id] = copy.deepcopy(user)

    def list_users(self) -> list[User]:
        with self._lock:
            return [copy.deepcopy(u) for u in self._users.values()]

    def get_project(self, project_id: str) -> Optional[Project]:
        with self._lock:
            project = self._projects.get(project_id)
            return copy.deepcopy(project) if project else None

    def put_project(self, project: Project):
        with self._lock:
            self._projects[project.id] = copy.deepcopy(project)

    def list_projects(self) -> list[Project]:
        with self._lock:
            return [copy.deepcopy(p) for p in self._projects.values()]

    def projects_by_owner(self, owner_id: str) -> list[Project]:
        with self._lock:
            return [copy.deepcopy(p) for p in self._projects.values() if p.owner_id == owner_id]

    def remove_user(self, user_id: str):
        """Physically delete a user (external removal path)."""
        with self._lock:
            self._users.pop(user_id, None)

    def remove_project(self, project_id: str):
        """Physically delete a project (external removal path)."""
        with self._lock:
            self._projects.pop(project_id, None)
