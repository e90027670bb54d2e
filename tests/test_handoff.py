import unittest

from prerender.handoff import HandoffError, rendered_ids, snapshot_ids, verify_handoff

RENDERED = """<!DOCTYPE html><html><head>
<template id="mv-ssr-template"><div mv-app="cart" id="cart"><span>pristine</span></div><div mv-app="profile" id="profile"><span>pristine</span></div></template>
</head><body>
<div mv-app="cart" class="mv-ssr-target mv-no-hiding-during-loading" data-ssr-id="cart"><span>3 items</span></div>
<div mv-app="profile" class="mv-ssr-target mv-no-hiding-during-loading" data-ssr-id="profile"><span>Ada</span></div>
<script>/* rehydration */</script>
</body></html>"""


class TestHandoff(unittest.TestCase):
    def test_ids_are_extracted(self):
        self.assertEqual(snapshot_ids(RENDERED), ["cart", "profile"])
        self.assertEqual(rendered_ids(RENDERED), ["cart", "profile"])

    def test_valid_markup_passes(self):
        self.assertEqual(verify_handoff(RENDERED), ["cart", "profile"])

    def test_markup_without_template_passes(self):
        self.assertEqual(verify_handoff("<html><body><p>raw</p></body></html>"), [])

    def test_orphan_snapshot_fails(self):
        html = RENDERED.replace('data-ssr-id="profile"', 'data-ssr-id="other"')
        with self.assertRaises(HandoffError) as cm:
            verify_handoff(html)
        self.assertIn("'profile' has no SSR-rendered element", str(cm.exception))

    def test_duplicate_live_element_fails(self):
        html = RENDERED.replace('data-ssr-id="profile"', 'data-ssr-id="cart"')
        with self.assertRaises(HandoffError) as cm:
            verify_handoff(html)
        self.assertIn("matches 2", str(cm.exception))

    def test_duplicate_snapshot_fails(self):
        html = RENDERED.replace('id="profile"><span>pristine', 'id="cart"><span>pristine')
        with self.assertRaises(HandoffError):
            verify_handoff(html)


if __name__ == "__main__":
    unittest.main()
