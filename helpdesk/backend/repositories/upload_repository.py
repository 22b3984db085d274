from typing import Optional

from sqlalchemy.orm import Session

from helpdesk.backend.core.database import Upload


class UploadRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, upload_id: str) -> Optional[Upload]:
        return self.db.query(Upload).filter_by(id=upload_id).first()

    def add(self, upload: Upload) -> Upload:
        self.db.add(upload)
        return upload
