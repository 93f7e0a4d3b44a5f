"""
Shared test configuration
"""
import io
import os
import uuid
from datetime import datetime, timedelta

import pytest
from botocore.exceptions import ClientError

# Configure settings before any app imports
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("APP_URL", "https://app.example.com")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from homerecall.app.config import settings
from homerecall.db.base import Base
from homerecall.models import RecallCase, RecallLog, RecallPhoto, Showing
from homerecall.services.storage.object_store import ObjectStoreGateway, recall_log_prefix
from homerecall.utils.validators import recall_policy, showing_policy


def client_error(code: str, operation: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": f"{code} error"}}, operation)


class _Paginator:
    def __init__(self, client):
        self.client = client

    def paginate(self, Bucket, Prefix=""):
        keys = sorted(k for (b, k) in self.client.objects if b == Bucket and k.startswith(Prefix))
        # two pages when there is more than one key, like a real listing would
        middle = len(keys) // 2
        for chunk in (keys[:middle], keys[middle:]):
            page = {"KeyCount": len(chunk)}
            if chunk:
                page["Contents"] = [
                    {"Key": k, "Size": len(self.client.objects[(Bucket, k)][0]), "LastModified": datetime.utcnow()}
                    for k in chunk
                ]
            yield page


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client methods the gateway calls."""

    def __init__(self):
        self.objects = {}
        self.failing_keys = set()
        self.missing_buckets = set()
        self.delete_objects_calls = 0

    def put_object(self, Bucket, Key, Body, ContentType=None, IfNoneMatch=None):
        if Key in self.failing_keys:
            raise client_error("InternalError", "PutObject")
        if IfNoneMatch == "*" and (Bucket, Key) in self.objects:
            raise client_error("PreconditionFailed", "PutObject")
        self.objects[(Bucket, Key)] = (Body, ContentType)
        return {"ETag": '"etag"'}

    def get_object(self, Bucket, Key):
        if Key in self.failing_keys:
            raise client_error("InternalError", "GetObject")
        if (Bucket, Key) not in self.objects:
            raise client_error("NoSuchKey", "GetObject")
        body, content_type = self.objects[(Bucket, Key)]
        return {"Body": io.BytesIO(body), "ContentType": content_type}

    def delete_object(self, Bucket, Key):
        if Key in self.failing_keys:
            raise client_error("InternalError", "DeleteObject")
        self.objects.pop((Bucket, Key), None)
        return {}

    def delete_objects(self, Bucket, Delete):
        self.delete_objects_calls += 1
        errors = []
        for entry in Delete["Objects"]:
            if entry["Key"] in self.failing_keys:
                errors.append({"Key": entry["Key"], "Code": "InternalError", "Message": "boom"})
                continue
            self.objects.pop((Bucket, entry["Key"]), None)
        return {"Errors": errors} if errors else {}

    def generate_presigned_url(self, ClientMethod, Params, ExpiresIn):
        if Params["Key"] in self.failing_keys:
            raise client_error("InternalError", "GeneratePresignedUrl")
        return f"https://{Params['Bucket']}.s3.test/{Params['Key']}?X-Amz-Expires={ExpiresIn}"

    def get_paginator(self, operation_name):
        assert operation_name == "list_objects_v2"
        return _Paginator(self)

    def head_bucket(self, Bucket):
        if Bucket in self.missing_buckets:
            raise client_error("404", "HeadBucket")
        return {}

    def keys(self, bucket):
        return sorted(k for (b, k) in self.objects if b == bucket)


@pytest.fixture
def db_session():
    """Create test database session."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = Session()
    yield session
    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def s3_client():
    return FakeS3Client()


@pytest.fixture
def recall_gateway(s3_client):
    return ObjectStoreGateway(s3_client, settings.RECALL_BUCKET, recall_policy(settings))


@pytest.fixture
def showing_gateway(s3_client):
    return ObjectStoreGateway(s3_client, settings.SHOWING_PHOTOS_BUCKET, showing_policy(settings))


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def other_owner_id():
    return uuid.uuid4()


@pytest.fixture
def make_case(db_session, owner_id):
    def _make_case(title="Kitchen remodel", owner=None, **kwargs):
        case = RecallCase(owner_id=owner or owner_id, title=title, **kwargs)
        db_session.add(case)
        db_session.commit()
        return case
    return _make_case


@pytest.fixture
def make_log(db_session):
    def _make_log(case, log_type="Before", note="", created_at=None):
        log = RecallLog(
            case_id=case.id,
            owner_id=case.owner_id,
            log_type=log_type,
            note=note,
            created_at=created_at or datetime(2024, 3, 5, 14, 30),
        )
        db_session.add(log)
        db_session.commit()
        return log
    return _make_log


@pytest.fixture
def make_photo(db_session, s3_client):
    """Photo row plus its blob in the fake recall bucket (unless orphaned)."""
    def _make_photo(log, filename="photo.jpg", data=b"\xff\xd8jpeg", orphaned=False, created_at=None):
        path = None
        if not orphaned:
            path = f"{recall_log_prefix(log.case_id, log.id)}/{uuid.uuid4()}.jpg"
            s3_client.objects[(settings.RECALL_BUCKET, path)] = (data, "image/jpeg")
        photo = RecallPhoto(
            log_id=log.id,
            owner_id=log.owner_id,
            storage_path=path,
            original_filename=filename,
            file_size=len(data),
            mime_type="image/jpeg",
            created_at=created_at or datetime.utcnow(),
        )
        db_session.add(photo)
        db_session.commit()
        return photo
    return _make_photo


@pytest.fixture
def make_showing(db_session, owner_id):
    def _make_showing(agent=None, **kwargs):
        data = dict(
            agent_id=agent or owner_id,
            public_token=str(uuid.uuid4()),
            buyer_name="Jamie Buyer",
            buyer_phone="+14155551234",
            address="12 Oak St",
            city="Springfield",
            state="IL",
            zip="62704",
            showing_datetime=datetime.utcnow() + timedelta(days=1),
        )
        data.update(kwargs)
        showing = Showing(**data)
        db_session.add(showing)
        db_session.commit()
        return showing
    return _make_showing
