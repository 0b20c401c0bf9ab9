# portal_api/deps.py
from fastapi import Request

from .documents import DocumentStore
from .stores.applications import ApplicationStore
from .stores.jobs import JobStore
from .stores.resumes import ResumeStore
from .stores.saved_jobs import SavedJobIndex
from .stores.subscribers import SubscriberStore
from .uploads import FileIntake


class Services:
    """Every store wired to one DocumentStore and one upload directory."""

    def __init__(self, store: DocumentStore, intake: FileIntake):
        self.store = store
        self.intake = intake
        self.jobs = JobStore(store)
        self.applications = ApplicationStore(store)
        self.subscribers = SubscriberStore(store)
        self.resumes = ResumeStore(store)
        self.saved_jobs = SavedJobIndex(store, self.jobs)


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_jobs(request: Request) -> JobStore:
    return get_services(request).jobs
