from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Vault settings
    vault_path: Path = Path(".")
    vault_name: str = ""  # Falls back to the vault directory name
    excluded_folders: list[str] = []

    # Cache settings
    cache_path: str = ".calloutdex/callouts.json"
    max_incremental_documents: int = 5
    max_new_documents: int = 5
    incremental_debounce_seconds: float = 0.5

    # Search settings
    max_search_results: int = 50
    search_in_filenames: bool = True
    search_in_titles: bool = True
    search_in_ids: bool = True
    search_in_content: bool = True

    # Canvas settings
    canvas_folder: str = "Callout Canvas"
    default_focal_width: int = 400
    default_focal_height: int = 180
    default_node_width: int = 350
    default_node_height: int = 150

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL

    def resolved_vault_name(self) -> str:
        return self.vault_name or self.vault_path.resolve().name


settings = Settings()
