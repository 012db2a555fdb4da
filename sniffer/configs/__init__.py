"""Configuration for sniffer"""

import pathlib

from dynaconf import Dynaconf, Validator

# Validators for sniffer settings.
_validators = [
    Validator("logging.format", is_in=["mozlog", "pretty"]),
    Validator("logging.level", is_in=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    Validator("logging.can_propagate", is_type_of=bool),
    # Ceilings for the newest-capability rung of each engine ladder. A ceiling
    # below the rung floor would clamp every modern browser to a bogus version.
    Validator("latest.firefox", is_type_of=int, must_exist=True, gte=44),
    Validator("latest.chrome", is_type_of=int, must_exist=True, gte=49),
    Validator("latest.edge", is_type_of=int, must_exist=True, gte=13),
    Validator("latest.opera", is_type_of=int, must_exist=True, gte=15),
]

# `root_path` = The directory holding the TOML files below.
# `envvar_prefix` = Export envvars with `export SNIFFER_FOO=bar`.
# `settings_files` = Load these files in the order.
# `environments` = Enable layered environments such as `development`, `production`, `testing` etc.
# `env_switcher` = Switch environments by `export SNIFFER_ENV=production`. Default: `development`.
# `validators` = Define validators for sniffer settings.

settings = Dynaconf(
    root_path=pathlib.Path(__file__).parent,
    envvar_prefix="SNIFFER",
    settings_files=[
        "default.toml",
        "development.toml",
        "production.toml",
        "testing.toml",
    ],
    environments=True,
    env_switcher="SNIFFER_ENV",
    validators=_validators,
)
