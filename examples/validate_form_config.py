"""Example: load every freezone form configuration and report which ones are usable."""
import sys

from formation_engine.core.logging import configure_logging
from formation_engine.workflow.repository import build_form_config_repository


def main():
    configure_logging()
    repository = build_form_config_repository(sys.argv[1] if len(sys.argv) > 1 else None)

    failures = 0
    for code in repository.available_freezones():
        lookup = repository.lookup(code)
        if lookup.valid:
            definition = lookup.definition
            print(f"{code}: OK ({len(definition.steps)} steps, version {definition.version})")
        else:
            failures += 1
            print(f"{code}: INVALID")
            for error in getattr(lookup.error, 'errors', [str(lookup.error)]):
                print('  -', error)

    return 1 if failures else 0


if __name__ == '__main__':
    sys.exit(main())
