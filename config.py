import os
from dotenv import load_dotenv
load_dotenv()


def _database_url():
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    if os.getenv("PG_HOST") or os.getenv("PG_DATABASE"):
        return "postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}".format(
            user=os.getenv("PG_USER", "postgres"),
            password=os.getenv("PG_PASSWORD", ""),
            host=os.getenv("PG_HOST", "localhost"),
            port=os.getenv("PG_PORT", "5432"),
            name=os.getenv("PG_DATABASE", "portal"),
        )
    return "sqlite:///portal.db"


def _engine_options(url):
    # sqlite gets its own pool from Flask-SQLAlchemy
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "10")),
        "pool_recycle": int(os.getenv("DB_POOL_RECYCLE", "1800")),
        "pool_pre_ping": True,
    }


def _split(value):
    return [v.strip() for v in value.split(",") if v.strip()]


class Config:
    CLIENT_ID = os.getenv("CLIENT_ID")
    CLIENT_SECRET = os.getenv("CLIENT_SECRET")
    TENANT_ID = os.getenv("TENANT_ID", "common")
    REDIRECT_URI = os.getenv("REDIRECT_URI", "http://localhost:3000/auth/azuread/callback")
    OIDC_AUTHORITY = os.getenv("OIDC_AUTHORITY", "https://login.microsoftonline.com")
    OIDC_SCOPES = os.getenv("OIDC_SCOPES", "openid profile email User.Read")
    OIDC_TIMEOUT = int(os.getenv("OIDC_TIMEOUT", "10"))

    SECRET_KEY = os.getenv("SECRET_KEY") or CLIENT_SECRET or "dev-secret"
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "false").lower() in ("1", "true", "yes")

    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    ALLOWED_EMAIL_DOMAINS = _split(os.getenv("ALLOWED_EMAIL_DOMAINS", "asoiu.edu.az,ufaz.edu.az"))
    ALLOWED_UPLOAD_EXTENSIONS = ["jpeg", "jpg", "png", "gif", "pdf", "doc", "docx", "txt", "ppt", "pptx"]
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
    FILE_UPLOAD_DIR = os.getenv("FILE_UPLOAD_DIR", os.path.join(UPLOAD_DIR, "files"))
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_MB", "25")) * 1024 * 1024

    PORT = int(os.getenv("PORT", "3000"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    WTF_CSRF_ENABLED = False
    CLIENT_ID = "test-client"
    CLIENT_SECRET = "test-client-secret"
    TENANT_ID = "test-tenant"
    REDIRECT_URI = "http://localhost/auth/azuread/callback"
    ALLOWED_EMAIL_DOMAINS = ["asoiu.edu.az", "ufaz.edu.az"]
