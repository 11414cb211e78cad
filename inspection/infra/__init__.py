from inspection.infra.repositories import Dataset, Repository, RepositoryError, load_dataset
from inspection.infra.store_client import SheetStoreClient, StoreError

__all__ = [
    "Dataset",
    "Repository",
    "RepositoryError",
    "load_dataset",
    "SheetStoreClient",
    "StoreError",
]
