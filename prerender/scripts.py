"""
Generated JavaScript for the two sides of the rehydration handoff.

build_page_script() is installed into the headless browser before navigation.
It captures a pristine clone of every component at init-start, waits for the
application to load and the DOM to go quiet, then embeds the clones and the
rehydration script into the document and calls back into Python.

build_client_script() is what a real browser later runs from the prerendered
markup. It lets the framework bind into the pristine clone off-screen while the
server-rendered markup stays visible, and swaps the bound clone in once that
component has gone quiet too.

Both sides share DEBOUNCE_SOURCE, the single quiescence state machine
(idle -> observing -> stable). All functions here are pure.
"""

import json

from prerender.models import RenderOptions

# Name of the function exposed to the page by the render engine
CALLBACK_NAME = "__ssrOnLoad"

# ES5 on purpose: it also runs in whatever browser loads the prerendered page.
DEBOUNCE_SOURCE = """
function ssrQuiescence(targets, delay, onStable) {
  var pass = { state: "idle", mutations: 0 };
  var timeoutID = null;
  var observer;
  var finish = function () {
    timeoutID = null;
    observer.disconnect();
    pass.state = "stable";
    onStable(pass);
  };
  observer = new MutationObserver(function (mutationsList) {
    if (timeoutID !== null) {
      pass.mutations += mutationsList.length;
      window.clearTimeout(timeoutID);
      timeoutID = window.setTimeout(finish, delay);
    }
  });
  for (var i = 0; i < targets.length; i++) {
    observer.observe(targets[i], { attributes: true, childList: true, subtree: true });
  }
  pass.state = "observing";
  timeoutID = window.setTimeout(finish, delay);
  return pass;
}
""".strip()

LOOKUP_SOURCE = """
function ssrLookup(path) {
  return path.split(".").reduce(function (obj, key) {
    return obj === undefined || obj === null ? undefined : obj[key];
  }, self);
}
""".strip()

CLIENT_SCRIPT = """
(function (config) {
  var adapter = config.adapter;
  __LOOKUP__
  __DEBOUNCE__
  var hooks = ssrLookup(adapter.hooks);
  if (!hooks) {
    return;
  }
  hooks.add(adapter.init_hook, function (component) {
    var template = document.getElementById(adapter.template_id);
    if (!template) {
      return;
    }
    var pristine = template.content.getElementById(component[adapter.id_property]);
    if (!pristine) {
      return;
    }
    var rendered = component[adapter.element_property];
    rendered.classList.add(adapter.init_class);
    component.ssrTarget = rendered;
    component[adapter.element_property] = pristine;

    Promise.resolve().then(function () {
      return component[adapter.data_loaded_property];
    }).then(function () {
      ssrQuiescence([pristine], config.pollTimeout, function () {
        pristine.classList.add(adapter.done_class);
        if (rendered.parentNode) {
          rendered.parentNode.replaceChild(pristine, rendered);
        }
      });
    }, function (error) {
      console.warn("ssr: data never loaded for " + component[adapter.id_property] + ", keeping static markup", error);
    });
  });
})(__CONFIG__);
""".strip()

PAGE_SCRIPT = """
(function (config) {
  // child frames load their own documents; only the top one is rendered
  if (window !== window.top) {
    return;
  }
  var adapter = config.adapter;
  var rawNodes = {};
  var appLoaded = false;
  var appLoadedAt = null;
  __LOOKUP__
  __DEBOUNCE__

  function components() {
    var registry = ssrLookup(adapter.registry) || {};
    return Object.keys(registry).map(function (key) { return registry[key]; });
  }

  function signal(hasFramework, stats) {
    window[config.callback](hasFramework, stats || null);
  }

  function settle(value) {
    return Promise.resolve(value).catch(function (error) { return error; });
  }

  function whenReady(path) {
    var dot = path.lastIndexOf(".");
    var owner = dot === -1 ? self : ssrLookup(path.slice(0, dot));
    var value = ssrLookup(path);
    return settle(typeof value === "function" ? value.call(owner) : value);
  }

  function embed(pass) {
    var live = {};
    components().forEach(function (component) {
      var element = component[adapter.element_property];
      element.classList.add(adapter.target_class);
      // keeps the framework from hiding the markup while the client reloads
      element.classList.add(adapter.no_hiding_class);
      element.setAttribute(adapter.id_attribute, component[adapter.id_property]);
      live[component[adapter.id_property]] = true;
    });

    var template = document.createElement("template");
    template.id = adapter.template_id;
    Object.keys(rawNodes).forEach(function (id) {
      if (!live[id]) {
        return;
      }
      var rawNode = rawNodes[id];
      rawNode.id = id;
      template.content.appendChild(rawNode);
    });
    rawNodes = {};
    document.head.appendChild(template);

    if (config.debugStyle) {
      var style = document.createElement("style");
      style.textContent = config.debugStyle;
      document.head.appendChild(style);
    }

    // innerHTML-parsed scripts never run, so only later clients execute it
    var holder = document.createElement("div");
    holder.innerHTML = "<script>" + config.clientScript + "<\\/script>";
    document.body.appendChild(holder.firstChild);

    signal(true, { settleMs: Date.now() - appLoadedAt, mutations: pass.mutations });
  }

  document.addEventListener("DOMContentLoaded", function () {
    if (!ssrLookup(adapter.global_name)) {
      signal(false);
      return;
    }
    ssrLookup(adapter.hooks).add(adapter.init_hook, function (component) {
      var id = component[adapter.id_property];
      if (config.snapshotPolicy === "first" && Object.prototype.hasOwnProperty.call(rawNodes, id)) {
        return;
      }
      rawNodes[id] = component[adapter.element_property].cloneNode(true);
    });
  });

  document.addEventListener(adapter.load_event, function () {
    if (appLoaded) {
      return;
    }
    appLoaded = true;
    appLoadedAt = Date.now();

    adapter.ready.reduce(function (chain, path) {
      return chain.then(function () { return whenReady(path); });
    }, Promise.resolve()).then(function () {
      // a component whose data fails to load still counts as settled
      return Promise.all(components().map(function (component) {
        return settle(component[adapter.data_loaded_property]);
      }));
    }).then(function () {
      var elements = components().map(function (component) {
        return component[adapter.element_property];
      });
      window.__ssrPass = ssrQuiescence(elements, config.pollTimeout, embed);
    });
  });
})(__CONFIG__);
""".strip()


def _to_js(value) -> str:
    # Output ends up inside <script>; never let it close the element early
    return json.dumps(value, ensure_ascii=True).replace("</", "<\\/")


def _fill(template: str, config: dict) -> str:
    return (
        template
        .replace("__LOOKUP__", LOOKUP_SOURCE)
        .replace("__DEBOUNCE__", DEBOUNCE_SOURCE)
        .replace("__CONFIG__", _to_js(config))
    )


def build_client_script(options: RenderOptions) -> str:
    """Rehydration script embedded in the output, parameterized with the poll timeout."""
    return _fill(CLIENT_SCRIPT, {
        "pollTimeout": options.poll_timeout_ms,
        "adapter": options.framework.to_js(),
    })


def build_debug_style(options: RenderOptions) -> str:
    adapter = options.framework
    return (
        f".{adapter.target_class} * {{ color: red !important; }}\n"
        f".{adapter.init_class} * {{ color: yellow !important; }}\n"
        f".{adapter.done_class} * {{ color: green !important; }}\n"
    )


def build_page_script(options: RenderOptions, callback: str = CALLBACK_NAME) -> str:
    """Instrumentation installed with add_init_script before navigation."""
    return _fill(PAGE_SCRIPT, {
        "callback": callback,
        "pollTimeout": options.poll_timeout_ms,
        "snapshotPolicy": options.snapshot_policy.value,
        "debugStyle": build_debug_style(options) if options.color_debug else None,
        "clientScript": build_client_script(options),
        "adapter": options.framework.to_js(),
    })
