"""
模板环境 - jinja2 包内模板加载

答案值一律自动转义；分区描述、帮助文本等由表单搭建方维护的富文本
通过 rich 过滤器以可信HTML输出（换行转 <br/>）。
"""

from __future__ import annotations

from functools import lru_cache

from jinja2 import Environment, PackageLoader, StrictUndefined
from markupsafe import Markup


def rich_text(value: str | None) -> Markup:
    """可信富文本：保留HTML，换行转 <br/>"""
    if not value:
        return Markup("")
    return Markup(value.replace("\r\n", "\n").replace("\n", "<br/>"))


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("formdoc.doc_gen", "templates"),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["rich"] = rich_text
    return env


def render_template(name: str, **context) -> str:
    return get_environment().get_template(name).render(**context)
