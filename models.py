from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
from flask_login import UserMixin


class AdminUser(UserMixin):
    """The single site administrator, identified by the configured username"""

    def __init__(self, username: str):
        self.id = username
        self.username = username


@dataclass
class Job:
    id: int
    title: str
    location: str
    description: str
    openings: int
    experience: int
    postedAt: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Job':
        return cls(
            id=data.get('id'),
            title=data.get('title') or '',
            location=data.get('location') or '',
            description=data.get('description') or '',
            openings=data.get('openings', 1),
            experience=data.get('experience', 0),
            postedAt=data.get('postedAt') or '',
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Application:
    id: int
    jobId: Any
    name: str
    email: str
    phone: str
    cover: str
    resume: Optional[str]
    appliedAt: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Application':
        return cls(
            id=data.get('id'),
            jobId=data.get('jobId'),
            name=data.get('name') or '',
            email=data.get('email') or '',
            phone=data.get('phone') or '',
            cover=data.get('cover') or '',
            resume=data.get('resume'),
            appliedAt=data.get('appliedAt') or '',
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
