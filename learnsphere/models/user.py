from __future__ import annotations

from dataclasses import dataclass

STUDENT = "student"
ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class User:
    id: str
    name: str
    email: str
    role: str | None = STUDENT  # student|admin; None is treated as student

    @staticmethod
    def new(*, name: str, email: str, role: str | None = STUDENT) -> User:
        # The lowercased email is the identity key.
        email = email.strip().lower()
        return User(id=email, name=name.strip(), email=email, role=role)

    @property
    def is_student(self) -> bool:
        return self.role in (STUDENT, None)
