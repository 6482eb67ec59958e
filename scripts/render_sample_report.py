import logging
import sys
from pathlib import Path

# Ensure we import the repo-local apidiff (not a pip-installed one).
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from apidiff import (API, APIMap, Annotation, Element, HtmlReporter,  # noqa: E402
                     LogReporter, MultiplexReporter, Position, executable_key,
                     module_key, package_key, primitive_type, type_key,
                     variable_key)


def same(apis, value):
    return APIMap.of(apis, {api: value for api in apis})


def main(out_dir):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    apis = [API("v1", "last release"), API("v2", "candidate")]
    old, new = apis

    mod = module_key("demo.base")
    pkg = package_key("demo.util", mod)
    cache = type_key("Cache", pkg)
    get = executable_key("get", cache, [primitive_type("int")])
    limit = variable_key("limit", cache)

    reporter = MultiplexReporter([HtmlReporter(apis, out_dir), LogReporter(apis)])
    reporter.comparing(Position.of(mod), same(apis, Element("module", "demo.base")))
    reporter.comparing(Position.of(pkg), same(apis, Element("package", "demo.util")))
    reporter.comparing(Position.of(cache), same(apis, Element("class", "Cache", "public class Cache")))
    reporter.report_different_raw_doc_comments(Position.of(cache), APIMap.of(apis, {
        old: "A simple cache.\nEntries never expire.",
        new: "A simple cache.\nEntries expire after the configured limit.",
    }))

    reporter.comparing(Position.of(get), same(apis, Element("method", "get", "public Object get(int key)")))
    reporter.report_different_annotations(Position.of(get), APIMap.of(apis, {
        old: (),
        new: (Annotation("Deprecated", (("since", '"2.0"'),)),),
    }))
    reporter.report_different_api_descriptions(Position.of(get), APIMap.of(apis, {
        old: "<p>Returns the entry for <code>key</code>.</p>",
        new: "<p>Returns the cached entry for <code>key</code>, or <code>null</code>.</p>",
    }))
    reporter.completed(Position.of(get), False)

    reporter.comparing(Position.of(limit), APIMap.of(apis, {new: Element("field", "limit", "public int limit")}))
    reporter.report_missing(Position.of(limit), {old})
    reporter.completed(Position.of(limit), False)

    reporter.completed(Position.of(cache), False)
    reporter.completed(Position.of(pkg), False)
    reporter.completed(Position.of(mod), False)
    reporter.completed_all(False)
    print("report written to", out_dir)


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "sample-report")
