"""Course content: modules, lessons, steps and their vocabulary."""
from zabaan.curriculum.models import Module


def _vocab(vid, en, fa, finglish, phonetic, lesson):
    return {"id": vid, "en": en, "fa": fa, "finglish": finglish, "phonetic": phonetic, "lesson_id": lesson}


def _flashcard(vid):
    return {"type": "flashcard", "points": 1, "data": {"vocabularyId": vid}}


def _quiz(prompt, options, correct, vid=None, points=2):
    data = {"prompt": prompt, "options": options, "correct": correct}
    if vid:
        data["vocabularyId"] = vid
    return {"type": "quiz", "points": points, "data": data}


def _matching(pairs):
    words = [{"id": f"word{i}", "text": text, "slotId": f"slot{i}"} for i, (text, _) in enumerate(pairs, 1)]
    slots = [{"id": f"slot{i}", "text": meaning} for i, (_, meaning) in enumerate(pairs, 1)]
    return {"type": "matching", "points": 3, "data": {"words": words, "slots": slots}}


def _welcome(title, description, objectives, lesson_type):
    return {
        "type": "welcome",
        "title": title,
        "description": description,
        "points": 0,
        "data": {"objectives": objectives, "lessonType": lesson_type},
    }


def _final(words, title, success, incorrect):
    return {
        "type": "final",
        "points": 4,
        "data": {
            "words": [{"id": vid, "text": text, "translation": tr} for vid, text, tr in words],
            "targetWords": [vid for vid, _, _ in words],
            "title": title,
            "successMessage": success,
            "incorrectMessage": incorrect,
        },
    }


MODULE1_LESSON1 = {
    "id": "lesson1",
    "title": "Basic Persian Greetings",
    "description": "Learn essential greetings and how to say hello in different contexts",
    "vocabulary": [
        _vocab("salam", "Hello", "سلام", "Salam", "sah-LUHM", "module1-lesson1"),
        _vocab("chetori", "How Are You?", "چطوری", "Chetori", "che-TOH-ree", "module1-lesson1"),
        _vocab("khosh_amadid", "Welcome", "خوش آمدید", "Khosh Amadid", "khosh uh-mah-DEED", "module1-lesson1"),
        _vocab("khodafez", "Goodbye", "خداحافظ", "Khodafez", "kho-DUH-fez", "module1-lesson1"),
    ],
    "steps": [
        _welcome(
            "Basic Greetings",
            "Learn common Persian greetings used in everyday conversations.",
            ["Say hello and greet someone", "Ask how someone is doing", "Welcome someone", "Say goodbye properly"],
            "greetings",
        ),
        _flashcard("salam"),
        _quiz("What does 'Salam' mean?", ["Hello", "Goodbye", "Thank you", "How are you"], 0),
        _flashcard("chetori"),
        {
            "type": "text-sequence",
            "points": 3,
            "data": {
                "finglishText": "Salam chetori",
                "expectedTranslation": "Hello How are you",
                "maxWordBankSize": 10,
            },
        },
        {
            "type": "input",
            "points": 2,
            "data": {"question": "How do you say 'How are you?' in Persian?", "answer": "Chetori"},
        },
        _matching([("Salam", "Hello"), ("Chetori", "How are you?")]),
        _flashcard("khosh_amadid"),
        {
            "type": "audio-meaning",
            "points": 2,
            "data": {"vocabularyId": "salam", "distractors": ["chetori", "khosh_amadid", "khodafez"]},
        },
        {
            "type": "audio-sequence",
            "points": 3,
            "data": {"sequence": ["salam", "chetori"], "expectedTranslation": "Hello How are you"},
        },
        _flashcard("khodafez"),
        _quiz("How do you say 'goodbye' in Persian?", ["Khodafez", "Salam", "Khosh Amadid", "Chetori"], 0),
        _matching([("Salam", "Hello"), ("Khosh Amadid", "Welcome"), ("Chetori", "How are you?"), ("Khodafez", "Goodbye")]),
        _final(
            [
                ("salam", "Salam", "Hello"),
                ("khosh_amadid", "Khosh Amadid", "Welcome"),
                ("chetori", "Chetori", "How are you?"),
                ("khodafez", "Khodafez", "Goodbye"),
            ],
            "Your First Conversation",
            "You're a natural, you made a great impression!",
            "Almost there, let's try that conversation order again!",
        ),
    ],
}

MODULE1_LESSON2 = {
    "id": "lesson2",
    "title": "Basic Politeness and Essential Responses",
    "description": "Master polite responses and common conversational phrases",
    "review_vocabulary": ["salam", "chetori"],
    "vocabulary": [
        _vocab("khoob", "Good", "خوب", "Khoob", "khoob", "module1-lesson2"),
        _vocab("khoobam", "I'm Good", "خوبم", "Khoobam", "khoo-BAHM", "module1-lesson2"),
        _vocab("merci", "Thank You", "مرسی", "Merci", "mer-SEE", "module1-lesson2"),
        _vocab("baleh", "Yes", "بله", "Baleh", "bah-LEH", "module1-lesson2"),
        _vocab("na", "No", "نه", "Na", "nah", "module1-lesson2"),
    ],
    "steps": [
        _welcome(
            "Politeness & Responses",
            "Master essential polite responses and learn to answer basic questions.",
            ["Respond when someone asks how you are", "Say thank you properly", "Answer yes and no questions"],
            "politeness",
        ),
        _flashcard("khoob"),
        _flashcard("khoobam"),
        _quiz("How do you say 'I'm good'?", ["Khoobam", "Khoob", "Merci", "Na"], 0, vid="khoobam"),
        _flashcard("merci"),
        {
            "type": "reverse-quiz",
            "points": 2,
            "data": {"prompt": "What does 'Merci' mean?", "options": ["Thank You", "Yes", "No", "Good"], "correct": 0},
        },
        _flashcard("baleh"),
        _flashcard("na"),
        {"type": "input", "points": 2, "data": {"question": "Type 'Yes' in Persian", "answer": "Baleh", "vocabularyId": "baleh"}},
        _matching([("Khoob", "Good"), ("Merci", "Thank you"), ("Baleh", "Yes"), ("Na", "No")]),
        {
            "type": "text-sequence",
            "points": 3,
            "data": {"finglishText": "Salam khoobam merci", "expectedTranslation": "Hello I'm good thank you"},
        },
        _final(
            [
                ("salam", "Salam", "Hello"),
                ("chetori", "Chetori", "How are you?"),
                ("khoobam", "Khoobam", "I'm good"),
                ("merci", "Merci", "Thank you"),
            ],
            "A Polite Reply",
            "Perfect, that was a very polite answer!",
            "Close, try putting the reply in order again.",
        ),
    ],
}

MODULE1_LESSON3 = {
    "id": "lesson3",
    "title": "Introducing Yourself",
    "description": "Ask for someone's name and share your own",
    "review_vocabulary": ["salam", "merci", "khodafez"],
    "vocabulary": [
        _vocab("man", "I / Me", "من", "Man", "man", "module1-lesson3"),
        _vocab("shoma", "You", "شما", "Shoma", "sho-MAH", "module1-lesson3"),
        _vocab("esm", "Name", "اسم", "Esm", "esm", "module1-lesson3"),
        _vocab("chiye", "What Is It?", "چیه", "Chiye", "chee-YEH", "module1-lesson3"),
    ],
    "steps": [
        _welcome(
            "Introductions",
            "Learn to ask someone's name and introduce yourself.",
            ["Say 'I' and 'you'", "Ask 'What is your name?'"],
            "introductions",
        ),
        _flashcard("man"),
        _flashcard("shoma"),
        _quiz("Which word means 'you'?", ["Shoma", "Man", "Esm", "Chiye"], 0, vid="shoma"),
        _flashcard("esm"),
        _flashcard("chiye"),
        {
            "type": "audio-meaning",
            "points": 2,
            "data": {"vocabularyId": "esm", "distractors": ["man", "shoma", "chiye"]},
        },
        {
            "type": "audio-sequence",
            "points": 3,
            "data": {"sequence": ["esm", "shoma", "chiye"], "expectedTranslation": "What is your name"},
        },
        _matching([("Man", "I / Me"), ("Shoma", "You"), ("Esm", "Name"), ("Chiye", "What is it?")]),
        _final(
            [
                ("salam", "Salam", "Hello"),
                ("esm", "Esm", "Name"),
                ("shoma", "Shoma", "You"),
                ("chiye", "Chiye", "What is it?"),
            ],
            "Meeting Someone New",
            "Great, you just asked your first question in Persian!",
            "Not quite, try the question order again.",
        ),
    ],
}

MODULE2_LESSON1 = {
    "id": "lesson1",
    "title": "Adjective Suffixes \"-am\" & \"-i\"",
    "description": "Form 'I am...' and 'you are...' with adjectives using suffixes",
    "review_vocabulary": ["salam", "chetori", "merci", "khoobam"],
    "vocabulary": [
        _vocab("khoob", "Good", "خوب", "Khoob", "khoob", "module2-lesson1"),
        _vocab("khoobi", "You Are Good", "خوبی", "Khoob-i", "khoob-ee", "module2-lesson1"),
    ],
    "steps": [
        _welcome(
            "Adjective Suffixes",
            "Attach -am for 'I am' and -i for 'you are' to an adjective.",
            ["Recognize the base adjective khoob", "Form khoob-am and khoob-i correctly"],
            "grammar",
        ),
        _flashcard("khoob"),
        {"type": "grammar-concept", "points": 2, "data": {"conceptId": "adjective-suffixes"}},
        _flashcard("khoobi"),
        _quiz("Which form means \"I am good\"?", ["khoobi", "khoobam", "khoob", "khodafez"], 1),
        _quiz("Which form means \"you are good\"?", ["khoobam", "khoob", "khoobi", "merci"], 2),
        _matching([("khoob", "good"), ("khoobam", "I am good"), ("khoobi", "you are good")]),
        _final(
            [
                ("salam", "Salam", "Hello"),
                ("chetori", "Chetori", "How are you?"),
                ("khoobam", "Khoobam", "I'm good"),
                ("khoobi", "Khoobi", "You are good"),
            ],
            "How Are You?",
            "Nice, you used both suffixes correctly!",
            "Almost, check which suffix means 'I am'.",
        ),
    ],
}

MODULE2_LESSON2 = {
    "id": "lesson2",
    "title": "Story: Meeting a Neighbor",
    "description": "Use your greetings and feelings in a short conversation",
    "review_vocabulary": ["salam", "chetori", "khoobam", "khoobi", "merci", "khodafez"],
    "vocabulary": [
        _vocab("kheily", "Very", "خیلی", "Kheily", "khey-LEE", "module2-lesson2"),
    ],
    "steps": [
        _welcome(
            "Meeting a Neighbor",
            "Chat with your neighbor Sara using what you've learned.",
            ["Greet a neighbor", "Say how you feel", "End the conversation politely"],
            "story",
        ),
        _flashcard("kheily"),
        _quiz("What does 'kheily khoobam' mean?", ["I'm very good", "You are good", "Thank you", "Goodbye"], 0),
        {"type": "story-conversation", "points": 1, "data": {"storyId": "neighbor-sara"}},
    ],
}

MODULE3_LESSON1 = {
    "id": "lesson1",
    "title": "Review & Refresh",
    "description": "Review everything you've learned before we talk about family",
    "review_vocabulary": ["salam", "chetori", "man", "shoma", "merci", "esm", "khoob", "kheily", "khodafez"],
    "vocabulary": [],
    "steps": [
        _welcome(
            "Review & Refresh",
            "Let's review everything you've learned before we talk about family!",
            ["Review greetings and basic phrases", "Practice name questions"],
            "review",
        ),
        _matching([("salam", "hello"), ("chetori", "how are you"), ("man", "I / me"), ("shoma", "you")]),
        _quiz("Which word means 'name'?", ["esm", "koja", "man", "chi"], 0),
        {
            "type": "audio-sequence",
            "points": 2,
            "data": {"sequence": ["salam", "esm", "shoma", "chiye"], "expectedTranslation": "Hello what is your name"},
        },
    ],
}

CURRICULUM = [
    Module(
        id="module1",
        title="Module 1: Greetings & Politeness",
        description="Start a conversation the right way: hello, goodbye, thank you, and how to introduce yourself.",
        available=True,
        requires_premium=False,
        lessons=[MODULE1_LESSON1, MODULE1_LESSON2, MODULE1_LESSON3],
    ),
    Module(
        id="module2",
        title="Module 2: Responses & Feelings",
        description="Express how you feel and respond naturally.",
        available=True,
        requires_premium=True,
        lessons=[MODULE2_LESSON1, MODULE2_LESSON2],
    ),
    Module(
        id="module3",
        title="Module 3: Family & Relationships",
        description="Describe your family or ask about someone else's.",
        available=True,
        requires_premium=True,
        lessons=[MODULE3_LESSON1],
    ),
    Module(
        id="module4",
        title="Module 4: Food & Ordering at a Restaurant",
        description="Order food, ask for the bill and talk about what you like to eat.",
        available=False,
        requires_premium=True,
    ),
]
