"""
Textual checks on the generated page instrumentation and rehydration script.
"""

import json
import re
import unittest

from prerender.framework import FrameworkAdapter, MAVO
from prerender.models import RenderOptions, SnapshotPolicy
from prerender.scripts import (
    CALLBACK_NAME,
    DEBOUNCE_SOURCE,
    build_client_script,
    build_debug_style,
    build_page_script,
)


def _config(script):
    """Decode the JSON config a generated script is invoked with."""
    match = re.search(r"\}\)\((\{.*\})\);$", script, re.DOTALL)
    return json.loads(match.group(1))


class TestClientScript(unittest.TestCase):
    def setUp(self):
        self.options = RenderOptions(poll_timeout_ms=750)
        self.script = build_client_script(self.options)

    def test_is_pure(self):
        self.assertEqual(self.script, build_client_script(RenderOptions(poll_timeout_ms=750)))

    def test_carries_poll_timeout(self):
        self.assertEqual(_config(self.script)["pollTimeout"], 750)

    def test_hooks_init_start_and_swaps_back(self):
        self.assertIn("hooks.add(adapter.init_hook", self.script)
        self.assertIn("replaceChild(pristine, rendered)", self.script)
        self.assertEqual(_config(self.script)["adapter"]["init_hook"], "init-start")

    def test_swap_back_waits_for_data_loaded(self):
        data_loaded = self.script.index("return component[adapter.data_loaded_property];")
        swap = self.script.index("replaceChild(pristine, rendered)")
        self.assertLess(data_loaded, swap)

    def test_uses_shared_debounce(self):
        self.assertIn(DEBOUNCE_SOURCE, self.script)

    def test_is_es5(self):
        self.assertNotIn("=>", self.script)
        self.assertIsNone(re.search(r"\b(let|const|async|await)\b", self.script))

    def test_never_closes_a_script_element(self):
        adapter = FrameworkAdapter(
            global_name="App", registry="App.all", hooks="App.hooks",
            init_hook="</script><b>", load_event="app-load", ready=(),
        )
        script = build_client_script(RenderOptions(framework=adapter))
        self.assertNotIn("</", script)
        self.assertEqual(_config(script)["adapter"]["init_hook"], "</script><b>")


class TestPageScript(unittest.TestCase):
    def test_embeds_client_script_and_callback(self):
        options = RenderOptions(poll_timeout_ms=300)
        config = _config(build_page_script(options))
        self.assertEqual(config["callback"], CALLBACK_NAME)
        self.assertEqual(config["pollTimeout"], 300)
        self.assertEqual(config["clientScript"], build_client_script(options))

    def test_debounce_shared_with_client(self):
        self.assertIn(DEBOUNCE_SOURCE, build_page_script(RenderOptions()))

    def test_snapshot_policy(self):
        self.assertEqual(_config(build_page_script(RenderOptions()))["snapshotPolicy"], "last")
        first = RenderOptions(snapshot_policy=SnapshotPolicy.FIRST)
        self.assertEqual(_config(build_page_script(first))["snapshotPolicy"], "first")

    def test_debug_style_only_when_requested(self):
        self.assertIsNone(_config(build_page_script(RenderOptions()))["debugStyle"])
        options = RenderOptions(color_debug=True)
        self.assertEqual(_config(build_page_script(options))["debugStyle"], build_debug_style(options))

    def test_adapter_is_forwarded(self):
        config = _config(build_page_script(RenderOptions()))
        self.assertEqual(config["adapter"], MAVO.to_js())
        self.assertEqual(config["adapter"]["ready"], ["Bliss.ready", "Mavo.inited"])

    def test_embed_order(self):
        """Tag live elements, fill the template, add the script, then call back."""
        script = build_page_script(RenderOptions())
        embed = script[script.index("function embed(pass)"):]
        positions = [
            embed.index("adapter.target_class"),
            embed.index("template.content.appendChild"),
            embed.index("holder.innerHTML"),
            embed.index("signal(true, "),
        ]
        self.assertEqual(positions, sorted(positions))

    def test_app_loaded_only_once(self):
        script = build_page_script(RenderOptions())
        self.assertIn("if (appLoaded) {", script)

    def test_child_frames_stay_silent(self):
        """Scenario: an iframe runs the same init script and must not answer for the page."""
        script = build_page_script(RenderOptions())
        guard = script.index("if (window !== window.top) {")
        self.assertLess(guard, script.index("DOMContentLoaded"))
        self.assertLess(guard, script.index("signal(false)"))

    def test_reports_settle_time_and_mutations(self):
        script = build_page_script(RenderOptions())
        self.assertIn("appLoadedAt = Date.now();", script)
        self.assertIn("settleMs: Date.now() - appLoadedAt, mutations: pass.mutations", script)


class TestDebugStyle(unittest.TestCase):
    def test_colors_each_phase(self):
        style = build_debug_style(RenderOptions())
        self.assertIn(".mv-ssr-target * { color: red !important; }", style)
        self.assertIn(".mv-ssr-init * { color: yellow !important; }", style)
        self.assertIn(".mv-ssr-done * { color: green !important; }", style)


if __name__ == "__main__":
    unittest.main()
