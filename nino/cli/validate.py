"""Validate command implementation."""

from nino.config import NinoSettings
from nino.exceptions import NinoException
from nino.inference import load_project
from nino.resolver import check_relations


def validate_command(args, settings: NinoSettings) -> int:
    """Load every descriptor and report what could not be parsed or resolved."""
    try:
        project = load_project(args.paths)
    except NinoException as e:
        print(f"❌ {e}")
        return 1

    for name, folder in project.items():
        print(
            f"📁 {name}: {len(folder.tables)} tables, "
            f"{len(folder.relations.relations)} relations, "
            f"{len(folder.data_connectors.dataconnectors)} connectors, "
            f"{len(folder.descriptors)} descriptors"
            + (", playbook" if folder.playbook is not None else "")
        )

    diagnostics = list(project.diagnostics) + check_relations(project)
    if not diagnostics:
        print("✅ All descriptors are valid")
        return 0

    print(f"\n⚠️  {len(diagnostics)} problem(s) found:")
    for diagnostic in diagnostics:
        print(f"  - {diagnostic}")
    return 1
