"""Release context for fork prereleases.

- semver: version parsing and precedence
- resolver: next-tag resolution (pure)
- tag_source, manifest, notes, gh: adapters around git, package.json and GitHub
- service: the release sequence built on top of them
"""

from __future__ import annotations
