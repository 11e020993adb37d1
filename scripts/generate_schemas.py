"""Generate JSON schemas from Pydantic models and save to schemas/ directory."""

import json
from pathlib import Path

from provguard.kernel.config import Configuration
from provguard.kernel.provenance import ProvenanceRecord


def generate_schemas():
    """Generate JSON schemas for the configuration and sidecar models."""
    schemas_dir = Path(__file__).parent.parent / "schemas"
    schemas_dir.mkdir(exist_ok=True)

    # Generate configuration schema
    config_schema = Configuration.model_json_schema()
    config_schema_path = schemas_dir / "configuration.schema.json"
    with open(config_schema_path, 'w', encoding='utf-8') as f:
        json.dump(config_schema, f, indent=2, ensure_ascii=False)
    print(f"Generated: {config_schema_path}")

    # Generate provenance sidecar schema
    sidecar_schema = ProvenanceRecord.model_json_schema()
    sidecar_schema_path = schemas_dir / "provenance_sidecar.schema.json"
    with open(sidecar_schema_path, 'w', encoding='utf-8') as f:
        json.dump(sidecar_schema, f, indent=2, ensure_ascii=False)
    print(f"Generated: {sidecar_schema_path}")

    print("\nSchema generation complete!")


if __name__ == "__main__":
    generate_schemas()
