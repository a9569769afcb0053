"""
Shared fixtures: a small, fully valid content pack written to disk.
"""

from pathlib import Path
from typing import Dict, Optional

import pytest


SKILL_KUBERNETES = """---
name: kubernetes
description: Kubernetes deployment patterns and manifests for production clusters
---

# Kubernetes

## Overview

Deploy containerized workloads with declarative manifests.

## Quick Start

Apply the manifests with kubectl and watch the rollout.

## Best Practices

Set resource requests and limits for every container.
"""

COMMAND_FEATURE = """---
description: Implement a feature end to end with tests
allowed-tools: Read, Write, Bash
argument-hint: "<feature description>"
---

# /dev:feature

Plan with /planning:plan, then implement.
"""

COMMAND_PLAN = """---
description: Create an implementation plan for a feature
---

# /planning:plan

Write the plan to plans/.
"""

AGENT_PLANNER = """---
name: planner
description: Breaks features into ordered implementation plans
skills:
  - devops/kubernetes
commands:
  - /planning:plan
---

# Planner

Use /planning:plan for every feature.
"""

WORKFLOW_FEATURE = """---
name: feature
description: Full feature development workflow from plan to review
agents:
  - planner
skills:
  - devops/kubernetes
commands:
  - /dev:feature
---

# Feature Workflow

## Steps

1. Run /dev:feature
"""

MODE_BRAINSTORM = """---
name: brainstorm
description: Divergent thinking mode for early ideation
---

# Brainstorm Mode

Switch with /mode:brainstorm.
"""

REGISTRY = """agents:
  planner:
    skills: [devops/kubernetes]
    commands: [/planning:plan]
workflows:
  development/feature:
    agents: [planner]
    skills: [devops/kubernetes]
    commands: [/dev:feature]
skill_categories: [devops]
command_namespaces: [dev, planning]
"""

VALID_PACK: Dict[str, str] = {
    "skills/devops/kubernetes/SKILL.md": SKILL_KUBERNETES,
    "commands/dev/feature.md": COMMAND_FEATURE,
    "commands/planning/plan.md": COMMAND_PLAN,
    "agents/planner.md": AGENT_PLANNER,
    "workflows/development/feature.md": WORKFLOW_FEATURE,
    "modes/brainstorm.md": MODE_BRAINSTORM,
    "registry.yaml": REGISTRY,
}


def write_pack(root: Path, files: Dict[str, Optional[str]]) -> Path:
    """Write files (relative path -> content) under root. None skips the file."""
    for relative, content in files.items():
        if content is None:
            continue
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_pack(tmp_path):
    """
    Build a pack from VALID_PACK with overrides.

    Usage: make_pack({"agents/extra.md": "...", "registry.yaml": None})
    """
    def _make(overrides: Optional[Dict[str, Optional[str]]] = None, base: bool = True) -> Path:
        files: Dict[str, Optional[str]] = dict(VALID_PACK) if base else {}
        files.update(overrides or {})
        return write_pack(tmp_path / "plugin", files)

    return _make
