from pydantic_settings import BaseSettings


class ViewerSettings(BaseSettings):
    API_BASE_URL: str = 'http://localhost:5000'
    API_TIMEOUT: float = 10.0

    # Key under which the login flow caches the bearer credential
    TOKEN_STORAGE_KEY: str = 'kaleereads_token'

    LOGIN_ROUTE: str = '/login'
    DEVTOOLS_REDIRECT: str = '/dashboard'
    DEVTOOLS_THRESHOLD: int = 160  # px
    DEVTOOLS_POLL_MS: int = 500
    BLUR_FILTER: str = 'blur(5px)'

    class Config:
        env_prefix = 'KALEEREADS_'
        env_file = '.env'
        env_file_encoding = 'utf-8'
        extra = 'ignore'
