from pydantic_settings import BaseSettings, SettingsConfigDict

from quantrisk.analysis.types import SimulationParams


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QR_",
    )

    # Simulation defaults
    simulation_alpha: float = 0.1
    simulation_beta: float = 0.8
    simulation_theta: float = 0.05
    simulation_switch_prob: float = 0.05
    simulation_num_paths: int = 1000
    simulation_num_steps: int = 252  # one trading year

    # Reproducibility (None = fresh OS entropy per run)
    simulation_seed: int | None = None

    # Parallelization
    simulation_max_workers: int = 4
    simulation_block_size: int = 250
    simulation_timeout: float = 120.0  # seconds, API only

    # Performance metrics
    risk_free_rate: float = 0.02

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    # Cache
    cache_ttl: int = 300  # seconds
    cache_max_entries: int = 256

    # Logging
    log_dir: str = "logs"

    def simulation_params(self, **overrides) -> SimulationParams:
        """Build SimulationParams from configured defaults plus overrides."""
        values = {
            "alpha": self.simulation_alpha,
            "beta": self.simulation_beta,
            "theta": self.simulation_theta,
            "switch_prob": self.simulation_switch_prob,
            "num_paths": self.simulation_num_paths,
            "num_steps": self.simulation_num_steps,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return SimulationParams(**values)
