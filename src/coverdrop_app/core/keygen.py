"""Generate runtime key values for CoverDrop."""

from __future__ import annotations

import argparse
import secrets
from pathlib import Path

from coverdrop_app.core.config import DEFAULT_DB_KEY_ENV, DEFAULT_ENCRYPTION_KEY_ENV
from coverdrop_app.core.crypto import CryptoService

ENV_FORMATS = ("shell", "shell-export", "powershell")


def render_line(name: str, value: str, env_format: str) -> str:
    if env_format == "powershell":
        return f"$env:{name}='{value}'"
    if env_format == "shell-export":
        return f"export {name}='{value}'"
    return f"{name}='{value}'"


def generate_keys() -> dict[str, str]:
    """Fresh database passphrase and base64 AES-256 field key."""
    return {
        DEFAULT_DB_KEY_ENV: secrets.token_urlsafe(48),
        DEFAULT_ENCRYPTION_KEY_ENV: CryptoService.generate_base64_key(),
    }


def render_keys(keys: dict[str, str], env_format: str) -> list[str]:
    return [render_line(name, value, env_format) for name, value in keys.items()]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate CoverDrop runtime keys.")
    parser.add_argument(
        "--write-env",
        default=None,
        help="Path to write generated keys. Omit to skip file output.",
    )
    parser.add_argument("--format", choices=ENV_FORMATS, default="shell")
    parser.add_argument("--stdout", action="store_true", help="Also print the lines.")
    parser.add_argument("--force", action="store_true", help="Overwrite an existing env file.")
    args = parser.parse_args(argv)

    lines = render_keys(generate_keys(), args.format)

    if args.write_env:
        target = Path(args.write_env)
        if target.exists() and not args.force:
            print(f"[INFO] key file already exists: {target}")
            return 1
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("\n".join(lines) + "\n", encoding="utf-8")
        print(f"[INFO] key file written: {target}")

    if args.stdout or not args.write_env:
        print("\n".join(lines))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
