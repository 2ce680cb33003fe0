"""Render resume text into the fixed-schema extraction prompt."""

RESUME_TEXT_START = "--- 简历文本开始 ---"
RESUME_TEXT_END = "--- 简历文本结束 ---"

SYSTEM_PROMPT = "你是一个中文简历解析助手，只输出 JSON。"

RESUME_EXTRACTION_PROMPT = """你是一个中文简历解析助手。请从下面的简历文本中提取候选人的姓名、性别、年龄、最高学历、手机号码和邮箱地址，并严格按照以下 JSON 格式返回：

{{
  "name": "姓名字符串或null",
  "gender": "性别（"male" 表示男，"female" 表示女，或 null）",
  "age": 年龄数字或null,
  "education": "最高学历字符串（如"大专"、"本科"、"硕士"、"博士"，或 null）",
  "phone": "手机号字符串或null",
  "email": "邮箱字符串或null"
}}

不要返回任何解释性文字，只返回 JSON。
重要声明：
- 如果找不到对应的内容，就填入 null，不要猜测。
- 年龄必须有明确的"xx岁"或"年龄：xx"字样才能填入，不要根据出生日期推算年龄。
- 性别必须有明确的文字说明才能填入，不能靠姓名、照片或其他信息推断。

{start}
{text}
{end}"""


def build_prompt(document_text: str) -> str:
    """Embed the resume text verbatim in the extraction instructions."""
    return RESUME_EXTRACTION_PROMPT.format(
        start=RESUME_TEXT_START,
        text=document_text or "",
        end=RESUME_TEXT_END,
    )
