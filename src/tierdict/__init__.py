"""tierdict: three-tier vocabulary entries from local LLM answers.

本文から学習候補語を抽出し、ローカル LLM（Ollama 互換）に語ごとの解説を
生成させ、その応答を専門/中級/初級の3段のエントリに復元して辞書に保存する。
"""

__version__ = "0.1.0"
