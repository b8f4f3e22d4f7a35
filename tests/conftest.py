from __future__ import annotations

import base64
import time

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient
from jose import jwt
from starlette.testclient import TestClient

from peoplehub.core.dependencies import get_current_user
from peoplehub.core.document_store import DocumentStore, document_store
from peoplehub.main import app
from peoplehub.models.auth import COMPANY_ADMIN, SUPER_ADMIN, UserInfo
from peoplehub.services.company_service import CompanyService
from peoplehub.services.employee_import import EmployeeImporter
from peoplehub.services.employee_service import EmployeeService
from peoplehub.services.identity import IdentityResolver, PasswordHasher
from peoplehub.services.integrity import ReferentialIntegrityGuard
from peoplehub.services.organization_service import OrganizationService
from peoplehub.services.spreadsheet import SpreadsheetParser
from peoplehub.services.survey_service import SurveyService
from tests.cosmos_fake import make_containers

TEST_ISSUER = "https://id.test.peoplehub.local"
TEST_AUDIENCE = "peoplehub-api"
TEST_JWKS_URL = "https://id.test.peoplehub.local/.well-known/jwks.json"
TEST_KID = "test-kid-1"

COMPANY_A = "company-a"


def _int_to_base64url(value: int) -> str:
    byte_length = (value.bit_length() + 7) // 8
    return base64.urlsafe_b64encode(value.to_bytes(byte_length, byteorder="big")).rstrip(b"=").decode("ascii")


def make_cpf(seed: int) -> str:
    """Build a CPF with valid check digits from any seed below 10**9."""
    base = [int(d) for d in f"{seed:09d}"]
    for length in (9, 10):
        total = sum(d * (length + 1 - i) for i, d in enumerate(base[:length]))
        check = (total * 10) % 11
        base.append(0 if check == 10 else check)
    return "".join(str(d) for d in base)


def company_payload(**overrides) -> dict:
    payload = {
        "cnpj": "12.345.678/0001-90",
        "fantasyName": "Acme Ltda",
        "fullAddress": "Rua das Flores, 100 - São Paulo/SP",
        "owner": "Maria Souza",
        "focalPoint": {"name": "João Lima", "email": "joao@acme.com.br", "phone": "(11) 98765-4321"},
    }
    payload.update(overrides)
    return payload


def employee_payload(department_id: str, position_id: str, **overrides) -> dict:
    payload = {
        "name": "Ana Silva Santos",
        "cpf": "529.982.247-25",
        "email": "ana@acme.com.br",
        "phone": "(11) 91234-5678",
        "departmentId": department_id,
        "positionId": position_id,
        "birthDate": "1990-05-10",
        "admissionDate": "2020-02-01",
        "gender": "Feminino",
        "educationLevel": "ensino_superior",
        "isLeader": False,
    }
    payload.update(overrides)
    return payload


@pytest.fixture(autouse=True)
def _auth_settings():
    from peoplehub.core.config import settings

    original = (settings.AUTH_ISSUER, settings.AUTH_AUDIENCE, settings.AUTH_JWKS_URL)
    settings.AUTH_ISSUER = TEST_ISSUER
    settings.AUTH_AUDIENCE = TEST_AUDIENCE
    settings.AUTH_JWKS_URL = TEST_JWKS_URL
    yield
    settings.AUTH_ISSUER, settings.AUTH_AUDIENCE, settings.AUTH_JWKS_URL = original


@pytest.fixture
def containers():
    return make_containers()


@pytest.fixture
def store(containers):
    """A fresh DocumentStore backed by in-memory containers."""
    store = DocumentStore()
    store.attach(**containers)
    return store


@pytest.fixture
def app_store(containers):
    """The application's DocumentStore singleton, backed by in-memory containers."""
    document_store.attach(**containers)
    yield document_store
    document_store.detach()


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def identity(store, hasher):
    return IdentityResolver(store, hasher)


@pytest.fixture
def guard(store):
    return ReferentialIntegrityGuard(store)


@pytest.fixture
def companies(store, identity, guard):
    return CompanyService(store, identity, guard)


@pytest.fixture
def organization(store, guard):
    return OrganizationService(store, guard)


@pytest.fixture
def employees(store, identity, guard):
    return EmployeeService(store, identity, guard)


@pytest.fixture
def surveys(store, identity, guard):
    return SurveyService(store, identity, guard)


@pytest.fixture
def importer(employees, organization, guard):
    return EmployeeImporter(employees, organization, guard, SpreadsheetParser())


@pytest.fixture
def company(containers):
    now = "2024-01-01T00:00:00+00:00"
    doc = {"id": COMPANY_A, **company_payload(), "createdAt": now, "updatedAt": now}
    containers["companies"].seed(doc)
    return doc


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def rsa_test_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("utf-8")

    pub = private_key.public_key().public_numbers()
    jwk_dict = {
        "kty": "RSA",
        "kid": TEST_KID,
        "use": "sig",
        "alg": "RS256",
        "n": _int_to_base64url(pub.n),
        "e": _int_to_base64url(pub.e),
    }
    jwks_response = {"keys": [jwk_dict]}
    return private_pem, jwks_response


def _make_token(
    private_pem: str,
    *,
    sub: str = "test-sub-123",
    name: str = "Test User",
    email: str = "test@peoplehub.local",
    roles: list[str] | None = None,
    company_id: str | None = None,
    audience: str = TEST_AUDIENCE,
    expired: bool = False,
) -> str:
    now = int(time.time())
    claims = {
        "sub": sub,
        "name": name,
        "email": email,
        "roles": roles or [],
        "iss": TEST_ISSUER,
        "aud": audience,
        "exp": now - 3600 if expired else now + 3600,
        "iat": now - 60,
        "nbf": now - 60,
    }
    if company_id:
        claims["companyId"] = company_id
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": TEST_KID})


@pytest.fixture
def mock_super_admin():
    return UserInfo(id="admin-1", name="Admin User", email="admin@peoplehub.local", roles=[SUPER_ADMIN])


@pytest.fixture
def mock_company_admin():
    return UserInfo(
        id="hr-1", name="HR User", email="hr@acme.com.br", roles=[COMPANY_ADMIN], company_id=COMPANY_A
    )


@pytest.fixture
def mock_viewer():
    return UserInfo(id="viewer-1", name="Viewer User", email="viewer@acme.com.br", roles=["viewer"])


@pytest.fixture
def authenticated_client(app_store, mock_super_admin):
    app.dependency_overrides[get_current_user] = lambda: mock_super_admin
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def company_admin_client(app_store, mock_company_admin):
    app.dependency_overrides[get_current_user] = lambda: mock_company_admin
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
