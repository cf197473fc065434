
from pydantic_settings import BaseSettings


class Settings(BaseSettings):

    opensearch_address: str = "https://localhost:9200"
    opensearch_username: str = "admin"
    opensearch_password: str = "admin"
    opensearch_verify_certs: bool = False
    opensearch_timeout: float = 60.0

    number_of_shards: int = 1
    number_of_replicas: int = 1

    # Semantic search
    knn_model_id: str = ""
    knn_dimension: int = 384
    knn_ef_search: int = 100
    knn_amount: int = 100
    token_limit: int = 700
    overlap_rate: float = 0.2

    max_content_size: int = 3000
    scroll_lifetime: str = "5m"
    pagination_lifetime: str = "1m"

    # Embeddings: "http", "local" or "none"
    embedder_kind: str = "http"
    embeddings_address: str = "http://localhost:8085"
    embeddings_model: str = "bge"
    embeddings_timeout: float = 30.0
    embedding_model: str = "intfloat/multilingual-e5-small"
    embedding_query_prefix: str = "query: "
    embedding_passage_prefix: str = "passage: "

    docs_path: str = "./docs"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
