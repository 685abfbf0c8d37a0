import re
from collections import Counter
from typing import List

MAX_KEYWORDS = 10

STOP_WORDS = {
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "need", "dare",
    "to", "of", "in", "for", "on", "with", "at", "by", "from", "as",
    "into", "through", "during", "before", "after", "above", "below",
    "and", "or", "but", "if", "then", "else", "when", "up", "down",
    "out", "off", "over", "under", "again", "further", "once",
    "that", "this", "these", "those", "what", "which", "who", "whom",
    "he", "she", "it", "they", "we", "you", "i", "me", "him", "her",
    # Thai
    "ที่", "และ", "ใน", "ของ", "เป็น", "ได้", "มี", "จะ", "ให้", "กับ",
    "ไม่", "ว่า", "นี้", "ก็", "แต่", "หรือ", "จาก", "โดย", "เมื่อ", "ถ้า",
}

# Thai block is listed explicitly: its vowel/tone marks are not \w
_NON_WORD = re.compile(r"[^\w\s\u0e00-\u0e7f]")


def extract_keywords(content: str, limit: int = MAX_KEYWORDS) -> List[str]:
    """Most frequent significant words (longer than 2 chars, not stop words), ties in first-seen order."""
    text = _NON_WORD.sub(" ", content.lower())
    words = [w for w in text.split() if len(w) > 2 and w not in STOP_WORDS]
    return [word for word, _ in Counter(words).most_common(limit)]


def escape_like(keyword: str) -> str:
    """Drop characters that would break a PostgREST or() filter or act as LIKE wildcards."""
    return re.sub(r"[%_,().*\\]", "", keyword)
