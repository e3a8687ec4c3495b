# backend/app/cli/__main__.py
from __future__ import annotations

import argparse

from app.cli.seed_demo import seed_demo


def main() -> None:
    p = argparse.ArgumentParser(prog="python -m app.cli")
    p.add_argument("--admin-email", default="admin@ownitright.local")
    p.add_argument("--admin-name", default="Admin")
    p.add_argument("--no-sample-properties", action="store_true")
    args = p.parse_args()

    out = seed_demo(
        admin_email=args.admin_email,
        admin_name=args.admin_name,
        create_sample_properties=(not args.no_sample_properties),
    )
    print(
        {
            "ok": True,
            "admin_email": out.admin_email,
            "admin_token": out.admin_token,
            "property_ids": out.property_ids,
            "customer_ids": out.customer_ids,
        }
    )


if __name__ == "__main__":
    main()
