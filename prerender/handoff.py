"""
Checks on finished markup before it is persisted or served.
Every embedded pristine snapshot must have exactly one live, SSR-tagged
counterpart, otherwise the rehydration script swaps the wrong element or none.
"""

from collections import Counter
from typing import List

from bs4 import BeautifulSoup

from prerender.framework import FrameworkAdapter, MAVO


class HandoffError(ValueError):
    """Raised when prerendered markup cannot be rehydrated safely."""
    pass


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'html.parser')


def snapshot_ids(html: str, adapter: FrameworkAdapter = MAVO) -> List[str]:
    """Identities of the pristine snapshots embedded in the template container."""
    template = _soup(html).find('template', id=adapter.template_id)
    if template is None:
        return []
    return [node['id'] for node in template.find_all(recursive=False) if node.get('id')]


def rendered_ids(html: str, adapter: FrameworkAdapter = MAVO) -> List[str]:
    """Identities of the live elements tagged as SSR-rendered (outside the template)."""
    soup = _soup(html)
    ids = []
    for element in soup.find_all(class_=adapter.target_class):
        if element.find_parent('template') is not None:
            continue
        ids.append(element.get(adapter.id_attribute))
    return ids


def verify_handoff(html: str, adapter: FrameworkAdapter = MAVO) -> List[str]:
    """
    Validate the snapshot/live correspondence.
    Returns the verified identities; raises HandoffError on the first violation.
    Markup without a template container has nothing to hand off and passes.
    """
    snapshots = snapshot_ids(html, adapter)
    live = Counter(rendered_ids(html, adapter))

    duplicated = [sid for sid, count in Counter(snapshots).items() if count > 1]
    if duplicated:
        raise HandoffError(f"Snapshot embedded more than once: {', '.join(duplicated)}")

    for sid in snapshots:
        if live[sid] == 0:
            raise HandoffError(f"Snapshot '{sid}' has no SSR-rendered element")
        if live[sid] > 1:
            raise HandoffError(f"Snapshot '{sid}' matches {live[sid]} SSR-rendered elements")
    return snapshots
