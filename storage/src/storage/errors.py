class StoreError(Exception):
    """Base error raised by the storage layer."""


class NotFoundError(StoreError):
    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"{collection} '{doc_id}' not found")
        self.collection = collection
        self.doc_id = doc_id
