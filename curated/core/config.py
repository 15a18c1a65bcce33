from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = "HS256"

    sql_echo: bool = False
    log_level: str = "INFO"
    create_schema_on_startup: bool = False

    # Листинг определений
    default_page_size: int = 4
    max_page_size: int = 100
    newest_limit_default: int = 4
    newest_limit_max: int = 100

    # PostgreSQL variables for Docker
    postgres_user: str = ""
    postgres_password: str = ""
    postgres_db: str = ""

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
