"""Prompt templates for the extraction and analysis model calls."""

from __future__ import annotations

import json

from magnetlink_optimizer.domain.entities import AnalysisItem

CONNECTION_TEST_PROMPT = "你好"

_EXTRACTION_TEMPLATE = """
作为数据提取引擎，你的唯一任务是从以下HTML内容中识别出所有磁力链接条目，并返回一个包含 "results" 数组的JSON对象。

**提取规则:**
1.  **识别条目**: 找到包含磁力链接 (`magnet:?xt=`) 的HTML片段。
2.  **提取字段**:
    *   `title`: 提取与磁力链接相关的最直接的标题文本。**不要进行任何形式的清理、修改或美化**。返回原始文本。
    *   `magnet_link`: 提取完整的磁力链接字符串。
    *   `file_size`: 提取与该条目相关的文件大小文本（例如 "1.5GB", "899MB"）。如果找不到，则返回 `null`。
    *   `source_url`: 提取该条目详情页的链接（标题所在 `<a>` 的 `href`）。如果找不到，则返回 `null`。
3.  **严格JSON输出**: 返回的JSON对象必须只包含一个 `results` 键，其值为一个对象数组。

**重要指令:**
*   **绝对禁止修改数据**: 你的任务是提取，不是处理。返回你找到的原始信息。
*   **保持顺序**: 按照在HTML中出现的顺序列出结果。
*   **不要包含任何解释**: 你的输出必须是纯粹的JSON。

**HTML内容:**
```html
{html}
```

**示例输出:**
```json
{{
  "results": [
    {{
      "title": "Some.Movie.Title.2023.1080p.BluRay.x264-GROUP[rartv]",
      "magnet_link": "magnet:?xt=urn:btih:abcdef123456...",
      "file_size": "2.3GB",
      "source_url": "/detail/abcdef123456.html"
    }}
  ]
}}
```
"""

_ANALYSIS_TEMPLATE = """
作为媒体资源分析引擎，请对下面的每一个条目分别完成三项任务，并严格按照JSON格式返回结果。

**任务1：精简标题**
- 仅输出作品名称和剧集信息，移除广告、网址、推广信息、画质、格式等内容。
- 如有多个作品名称或语言版本，按英语 → 汉语 → 其他语言的顺序全部输出，用空格分隔。
- 如有季数或集数信息（如S01E02），附在名称之后；原始标题中没有则不输出。

**任务2：计算纯净度分数**
- 对文件名列表中的每个文件打分：纯广告文件（如 `.txt`, `.url` 或包含广告词）0分；
  文件名含广告信息（如网址）的媒体文件80分；干净的媒体文件100分。
- 取所有文件分数的平均值并四舍五入，输出0-100之间的整数。

**任务3：提取标签**
- 严格按顺序提取：画质（如1080p、4K）、语言（如Chinese、English）、
  字幕（如Chinese Sub）、特殊格式（如BluRay、HDR），每类最多1个，总共最多4个。
- 无法从原始标题获得的类别直接省略，不要编造。

**输入数据 (JSON):**
{items}

**输出要求:**
- 返回一个只包含 "results" 键的JSON对象，其值为数组。
- 数组长度必须等于输入条目数量（{count}），并与输入保持相同顺序。
- 每个元素包含 `cleaned_title`、`purity_score`、`tags` 三个字段。
- 不要包含任何额外的解释。

**示例输出:**
```json
{{
  "results": [
    {{
      "cleaned_title": "Transformers 变形金刚 S01E02",
      "purity_score": 95,
      "tags": ["4K", "Chinese", "Chinese Sub", "BluRay"]
    }}
  ]
}}
```
"""


def build_extraction_prompt(html: str) -> str:
    return _EXTRACTION_TEMPLATE.format(html=html)


def build_analysis_prompt(items: list[AnalysisItem]) -> str:
    """Render the batch analysis prompt; items are numbered to pin the order."""
    payload = [
        {"index": index, "title": item.title, "file_list": item.file_list}
        for index, item in enumerate(items)
    ]
    return _ANALYSIS_TEMPLATE.format(
        items=json.dumps(payload, ensure_ascii=False, indent=2),
        count=len(items),
    )
