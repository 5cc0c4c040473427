from __future__ import annotations

import sys

from bjj_membership_poc.membership_protocol.test_vectors import ecdsa_vectors


def main() -> int:
    data = ecdsa_vectors.load_vectors()
    errors = ecdsa_vectors.validate_vectors(data)
    if errors:
        for error in errors:
            print(f"ecdsa_vectors.json: {error}", file=sys.stderr)
        return 1
    print("ecdsa_vectors.json: OK")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
