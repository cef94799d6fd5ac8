# toeic_mocktest/core/dummy_data.py
from datetime import datetime, timezone
from typing import List, Dict, Any

# Sample TOEIC mock test used when the database is unavailable
SAMPLE_TEST_ID = "65f1c0de0000000000000001"

DUMMY_TESTS: List[Dict[str, Any]] = [
    {
        "_id": SAMPLE_TEST_ID,
        "title": "TOEIC Mini Mock Test 1",
        "description": "Short Listening and Reading practice covering Parts 1, 2, 5 and 7.",
        "createdAt": datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc),
        "visibility": "all",
        "sections": [
            {
                "name": "Listening",
                "part": 1,
                "durationMinutes": 45,
                "linear": True,
                "groups": [
                    {
                        "title": "Part 1: Photographs",
                        "instructions": "Look at the picture and choose the statement that best describes it.",
                        "imageUrl": "/media/toeic1/part1-q1.jpg",
                        "audioUrl": "/media/toeic1/part1-q1.mp3",
                        "questions": [
                            {
                                "number": 1,
                                "type": "MCQ",
                                "prompt": "Listen and choose the best description of the photograph.",
                                "options": [
                                    {"key": "A", "text": "A woman is typing on a laptop."},
                                    {"key": "B", "text": "A woman is watering plants."},
                                    {"key": "C", "text": "A man is repairing a chair."},
                                    {"key": "D", "text": "Some people are boarding a bus."}
                                ],
                                "answer": "A",
                                "explanation": "The speaker describes a woman **typing on a laptop**."
                            }
                        ]
                    }
                ]
            },
            {
                "name": "Listening",
                "part": 2,
                "durationMinutes": 45,
                "linear": True,
                "groups": [
                    {
                        "title": "Part 2: Question-Response",
                        "instructions": "Choose the best response to the question.",
                        "audioUrl": "/media/toeic1/part2-q2.mp3",
                        "questions": [
                            {
                                "number": 2,
                                "type": "MCQ",
                                "prompt": "Where is the quarterly report?",
                                "options": [
                                    {"key": "A", "text": "On your desk."},
                                    {"key": "B", "text": "Every three months."},
                                    {"key": "C", "text": "Yes, I reported it."}
                                ],
                                "answer": "A",
                                "explanationHtml": "<p>A <em>where</em> question asks for a location.</p>"
                            }
                        ]
                    }
                ]
            },
            {
                "name": "Reading",
                "part": 5,
                "durationMinutes": 75,
                "linear": False,
                "groups": [
                    {
                        "title": "Part 5: Incomplete Sentences",
                        "instructions": "Choose the word that best completes the sentence.",
                        "questions": [
                            {
                                "number": 1,
                                "type": "MCQ",
                                "prompt": "The manager asked all staff to submit their reports ____ Friday.",
                                "options": [
                                    {"key": "A", "text": "at"},
                                    {"key": "B", "text": "by"},
                                    {"key": "C", "text": "on"},
                                    {"key": "D", "text": "in"}
                                ],
                                "answer": "B",
                                "explanation": "*By* marks a deadline."
                            },
                            {
                                "number": 2,
                                "type": "MCQ",
                                "prompt": "Ms. Tanaka has been ____ to regional sales director.",
                                "options": [
                                    {"key": "A", "text": "promote"},
                                    {"key": "B", "text": "promoting"},
                                    {"key": "C", "text": "promoted"},
                                    {"key": "D", "text": "promotion"}
                                ],
                                "answer": "C"
                            }
                        ]
                    }
                ]
            },
            {
                "name": "Reading",
                "part": 7,
                "durationMinutes": 75,
                "linear": False,
                "groups": [
                    {
                        "title": "Part 7: Single Passage",
                        "instructions": "Read the e-mail and answer the question.",
                        "passageHtml": (
                            "<p>To: All employees<br>From: Facilities</p>"
                            "<p>The east parking lot will be closed on Saturday for repaving. "
                            "Please use the west lot until Monday morning.</p>"
                        ),
                        "questions": [
                            {
                                "number": 3,
                                "type": "MCQ",
                                "prompt": "Why will the east parking lot be closed?",
                                "options": [
                                    {"key": "A", "text": "It is being expanded."},
                                    {"key": "B", "text": "It is being repaved."},
                                    {"key": "C", "text": "It is reserved for visitors."},
                                    {"key": "D", "text": "It is being cleaned."}
                                ],
                                "answer": "B"
                            }
                        ]
                    }
                ]
            }
        ]
    }
]
