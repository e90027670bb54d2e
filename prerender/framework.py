"""
Description of the client framework's lifecycle signals.

The page-side instrumentation never hardcodes framework names; it reads them
from a FrameworkAdapter serialized into the generated scripts. Anything that
exposes the same shape (a global registry, a hook facility with an
init-start hook, a per-component data-loaded promise and a document-level
app-loaded event) can be prerendered.
"""

from dataclasses import dataclass, asdict
from typing import Tuple


@dataclass(frozen=True)
class FrameworkAdapter:
    # Global object whose presence means "framework on page"
    global_name: str
    # Dotted path to the live component registry (object keyed by identity)
    registry: str
    # Dotted path to the hook facility exposing .add(name, fn)
    hooks: str
    init_hook: str
    # Document event fired once all components exist
    load_event: str
    # Dotted paths awaited before observing; functions are called first
    ready: Tuple[str, ...]
    # Component properties
    id_property: str = "id"
    element_property: str = "element"
    data_loaded_property: str = "dataLoaded"
    # Output markers
    template_id: str = "mv-ssr-template"
    id_attribute: str = "data-ssr-id"
    target_class: str = "mv-ssr-target"
    no_hiding_class: str = "mv-no-hiding-during-loading"
    init_class: str = "mv-ssr-init"
    done_class: str = "mv-ssr-done"

    def to_js(self) -> dict:
        data = asdict(self)
        data["ready"] = list(self.ready)
        return data


MAVO = FrameworkAdapter(
    global_name="Mavo",
    registry="Mavo.all",
    hooks="Mavo.hooks",
    init_hook="init-start",
    load_event="mv-load",
    ready=("Bliss.ready", "Mavo.inited"),
)
