"""Prompt builders for entry generation and candidate refinement.

エントリ生成プロンプトは3形式（JSON のみ / ```json フェンス / 絵文字見出しの3モード文）。
どの形式の応答も parsing.response.parse が同じ VocabularyEntry に復元する。
"""

from typing import Sequence

from .config import PromptStyle
from .parsing.sections import MODE_SEPARATOR


_ENTRY_SCHEMA = """{{
  "word": "{word}",
  "modes": {{
    "professional": {{
      "title": "{word}",
      "definition": "英文学术定义",
      "pronunciation": "音标",
      "academicUsage": ["学术例句"],
      "everydayUse": ["日常例句"],
      "associatedVocabulary": ["相关词汇"],
      "grammar": ["语法点"],
      "collocations": {{"搭配类型": "搭配词组"}},
      "synonyms": [{{"word": "同义词", "explanation": "解释"}}],
      "antonyms": [{{"word": "反义词", "explanation": "解释"}}]
    }},
    "intermediate": {{
      "title": "{word}",
      "definition": "中文释义",
      "pronunciation": "发音",
      "academicUsage": ["学术例句"],
      "everydayUse": ["日常例句"],
      "associatedVocabulary": [{{"en": "英文词", "zh": "中文释义"}}],
      "grammar": ["语法点"],
      "collocations": {{"搭配类型": "搭配词组"}},
      "synonyms": [{{"word": "同义词", "explanation": "解释"}}]
    }},
    "elementary": {{
      "title": "{word}",
      "definition": "简单中文解释",
      "pronunciation": "简化发音",
      "usage": ["简单例句"],
      "relatedWords": "相关词汇",
      "tips": "记忆方法",
      "similarWords": [{{"word": "简单同义词", "explanation": "解释"}}]
    }}
  }}
}}"""


def _schema(word: str) -> str:
    return _ENTRY_SCHEMA.format(word=word)


def json_prompt(word: str) -> str:
    return (
        f'为词汇"{word}"创建三模式词典条目，以简单JSON格式返回。只返回JSON，不要解释或使用代码块。\n\n'
        f"格式：\n{_schema(word)}"
    )


def fenced_json_prompt(word: str) -> str:
    return (
        f'为词汇"{word}"创建三模式词典条目。将唯一的JSON对象放在一个 ```json 代码块中返回，'
        "代码块之外不要输出其他内容。\n\n"
        f"格式：\n```json\n{_schema(word)}\n```"
    )


def tri_mode_prompt(word: str) -> str:
    """Emoji-headed prose in three modes separated by the mode separator."""
    return f"""请为学术词汇"{word}"创建一个完整的词条，按以下格式包含三种不同的展示模式。每个模式之间使用{MODE_SEPARATOR}作为分隔符。

模式1: 专业英文模式 (完全英文，学术性强)
📘 Word: {word}
🧠 Definition: [详细的学术定义]
🔊 Pronunciation: [音标]
🎯 Academic Usage:
• [学术例句1]
• [学术例句2]
💬 Everyday Use:
• [日常例句1]
🔗 Associated Academic Vocabulary: [相关学术词汇，用逗号分隔]
🧭 Grammar & Usage:
• [语法点1]
🔄 Collocations:
• [常见搭配类型1]: [搭配词组]
📝 Synonyms:
• [同义词1] ([简短解释])
🚫 Antonyms:
• [反义词1] ([简短解释])

{MODE_SEPARATOR}

模式2: 中文解说模式 (中英双语)
📘 词汇: {word}
🧠 定义: [中文简明释义]
🔊 发音: [音标]
🎯 学术用法:
• [英文例句1]
💬 日常用法:
• [英文例句1]
🔗 相关学术词汇: [英文词 (中文释义)，用逗号分隔]
🧭 语法与用法:
• [中文解释的语法点1]
🔄 常见搭配:
• [搭配类型1]: [搭配词组]
📝 同义词:
• [同义词1] ([中文解释])

{MODE_SEPARATOR}

模式3: 儿童启蒙模式 (简单易懂)
📘 词汇: {word}
🧠 意思: [非常简单的中文解释]
🔊 怎么读: [简化的发音指导]
🎯 怎么用:
• [简单例句1]
🔗 相关词汇: [简单相关词汇]
🧭 小贴士: [简单记忆方法]
📝 类似的词:
• [简单同义词1] ([简单解释])

请确保严格遵循上述格式，使用emoji标识各部分，并保持三种模式的内容相互独立且完整。"""


def entry_prompt(word: str, style: PromptStyle | str = PromptStyle.json) -> str:
    style = PromptStyle(style)
    if style is PromptStyle.fenced_json:
        return fenced_json_prompt(word)
    if style is PromptStyle.tri_mode:
        return tri_mode_prompt(word)
    return json_prompt(word)


def refine_prompt(words: Sequence[str]) -> str:
    """Ask the LLM to keep only study-worthy words from a frequency-ranked list."""
    return (
        "Please identify and extract academic or valuable vocabulary words from the following list. "
        "Focus on words that are important in academic contexts, specialized terminology, or words "
        "that would be valuable for a language learner to study. Exclude common everyday words, "
        "simple words, proper nouns, and non-academic terms.\n\n"
        f"List of words: {', '.join(words)}\n\n"
        "Please return ONLY a comma-separated list of the academic words, with no other text or explanations."
    )
