"""
Canned replies that short-circuit the provider chain.

Lookups are exact matches on the lower-cased, stripped query. A hit means no
search result or language model is involved at all.
"""
from typing import Optional

SHORT_QUERY_REPLY = "Could you please provide a more detailed question? I'm here to help!"

QUICK_PATTERNS = {
    "what is ai": (
        "AI (Artificial Intelligence) is technology that enables machines to perform tasks that "
        "typically require human intelligence, such as learning, reasoning, and problem-solving."
    ),
    "what is artificial intelligence": (
        "Artificial Intelligence (AI) is a branch of computer science that aims to create intelligent "
        "machines capable of performing tasks that typically require human intelligence."
    ),
    "hello": "Hello! I'm Verixa AI, your intelligent search assistant. How can I help you today?",
    "hi": "Hi there! I'm here to help you find information and answer your questions. What would you like to know?",
    "help": (
        "I can help you search for information, answer questions, and provide detailed explanations "
        "on various topics. Just ask me anything!"
    ),
}

GREETINGS = {
    # English
    "hey": "Hey there! What's up?",
    "good morning": "Good morning! Hope you're having a great day!",
    "good afternoon": "Good afternoon! How's your day going?",
    "good evening": "Good evening! How was your day?",
    "how are you": "I'm doing great! How about you?",
    "whats up": "Not much, just here to help! What's on your mind?",
    "sup": "Hey! What's going on?",
    "yo": "Yo! What's happening?",
    "wassup": "What's up! How's it going?",
    "howdy": "Howdy! Nice to see you!",
    "hola": "Hola! ¿Cómo estás?",
    # Hindi
    "namaste": "Namaste! Kaise hain aap?",
    "kaise ho": "Main theek hoon! Tum kaise ho?",
    "kaise ho dost": "Main bilkul theek hoon dost! Tum batao, kya haal hai?",
    "kya haal hai": "Sab badhiya hai! Tumhara kya haal?",
    "adab": "Adab! Kaise hain aap?",
    "sat sri akal": "Sat Sri Akal! Kaise ho ji?",
    "ram ram": "Ram Ram! Kaise hain?",
    "jai hind": "Jai Hind! Kaise ho bhai?",
}

AI_QUESTIONS = {
    "ai ke bare mai btao": (
        "AI (Artificial Intelligence) ek advanced technology hai jo machines ko human-like intelligence "
        "deti hai. Ye machine learning, deep learning, aur neural networks ka use karke complex problems "
        "solve karti hai."
    ),
    "ai kya hai": (
        "AI matlab Artificial Intelligence hai - ye ek technology hai jo computers ko insaan ki tarah "
        "sochne aur decisions lene ki capability deti hai."
    ),
    "artificial intelligence kya hai": (
        "Artificial Intelligence ek computer science field hai jo machines ko intelligent behavior "
        "sikhane par focus karti hai."
    ),
    "machine learning kya hai": (
        "Machine Learning AI ka ek part hai jisme computers data se automatically learn karte hain bina "
        "explicitly programmed hue."
    ),
}


def quick_answer(query: str) -> Optional[str]:
    """
    Canned reply for greetings, stock AI questions and too-short queries.

    Example:
        >>> quick_answer("  Namaste ")
        'Namaste! Kaise hain aap?'
        >>> quick_answer("weather in Delhi") is None
        True
    """
    key = query.lower().strip()
    if key in QUICK_PATTERNS:
        return QUICK_PATTERNS[key]
    if len(key) < 3:
        return SHORT_QUERY_REPLY
    return GREETINGS.get(key) or AI_QUESTIONS.get(key)
