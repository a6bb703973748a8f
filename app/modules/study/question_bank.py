"""Static question banks and option lists.

Used when no LLM provider is configured and as the deterministic fallback
when generation fails. Results always have exactly ``count`` entries; short
banks are cycled.
"""

from __future__ import annotations

import re
from pathlib import PurePath
from typing import Optional

from app.modules.study.models import Difficulty, OptionItem, StudyOptions

QA = tuple[str, str]

DEFAULT_SUBJECT = "mathematics"

SUBJECTS: list[OptionItem] = [
    OptionItem(value="mathematics", label="Mathematics"),
    OptionItem(value="science", label="Science"),
    OptionItem(value="history", label="History"),
    OptionItem(value="geography", label="Geography"),
    OptionItem(value="literature", label="Literature"),
    OptionItem(value="computer_science", label="Computer Science"),
]

CLASS_LEVELS: list[OptionItem] = [
    OptionItem(value="1", label="1st Class"),
    OptionItem(value="5", label="5th Class"),
    OptionItem(value="9", label="9th Class"),
    OptionItem(value="12", label="12th Class"),
    OptionItem(value="college", label="College Level"),
]

DIFFICULTY_LEVELS: list[OptionItem] = [
    OptionItem(value="easy", label="Easy", color="success", icon="battery-quarter"),
    OptionItem(value="medium", label="Medium", color="warning", icon="battery-half"),
    OptionItem(value="hard", label="Hard", color="error", icon="battery-full"),
]

QUESTION_COUNTS: list[OptionItem] = [
    OptionItem(value=5, label="5"),
    OptionItem(value=10, label="10"),
    OptionItem(value=15, label="15"),
]


def study_options() -> StudyOptions:
    return StudyOptions(
        subjects=SUBJECTS,
        class_levels=CLASS_LEVELS,
        difficulty_levels=DIFFICULTY_LEVELS,
        question_counts=QUESTION_COUNTS,
    )


QUESTION_BANK: dict[str, dict[Difficulty, list[QA]]] = {
    "mathematics": {
        Difficulty.HARD: [
            (
                "Explain the relationship between complex numbers and vector rotations in 2D space.",
                "Multiplying by a complex number z = a + bi scales by |z| and rotates by arg(z), "
                "so complex multiplication describes rotations and scalings of the plane.",
            ),
            (
                "How does the concept of a limit relate to the derivative in calculus?",
                "The derivative is the limit of the difference quotient as h approaches 0: "
                "f'(x) = lim(h→0)[(f(x+h)-f(x))/h].",
            ),
            (
                "Analyze the connection between eigenvalues and matrix diagonalization.",
                "Eigenpairs satisfy Av = λv. A matrix is diagonalizable when it has n linearly "
                "independent eigenvectors, giving P⁻¹AP = D.",
            ),
            (
                "Explain how the Fundamental Theorem of Calculus bridges differential and integral calculus.",
                "If F is an antiderivative of f then ∫[a to b]f(x)dx = F(b) - F(a), so integration "
                "and differentiation are inverse operations.",
            ),
            (
                "How does the concept of a group in abstract algebra generalize symmetry?",
                "Groups capture symmetry through closure, associativity, identity and inverses; "
                "composing symmetries corresponds to group multiplication.",
            ),
        ],
        Difficulty.MEDIUM: [
            (
                "What is the quadratic formula and when is it used?",
                "x = (-b ± √(b² - 4ac)) / 2a solves ax² + bx + c = 0 and gives all of its roots.",
            ),
            (
                "Explain the concept of a function's derivative.",
                "A derivative measures the rate of change of a function at a point: the slope "
                "of the tangent line there.",
            ),
            (
                "What is the relationship between sine and cosine?",
                "They differ by a phase of π/2 and satisfy sin²(θ) + cos²(θ) = 1.",
            ),
            (
                "How do you solve a system of linear equations using matrices?",
                "Use Gaussian elimination or the matrix inverse; a unique solution exists when "
                "the coefficient matrix has a non-zero determinant.",
            ),
            (
                "What is a logarithm and how does it relate to exponents?",
                "A logarithm is the inverse of exponentiation: if bˣ = y then log_b(y) = x.",
            ),
        ],
        Difficulty.EASY: [
            (
                "What is the Pythagorean theorem?",
                "In a right triangle a² + b² = c², where c is the hypotenuse.",
            ),
            (
                "How do you find the area of a rectangle?",
                "Multiply its length by its width: Area = length × width.",
            ),
            (
                "What is the order of operations in mathematics?",
                "Parentheses, Exponents, Multiplication and Division (left to right), "
                "Addition and Subtraction (left to right).",
            ),
            (
                "What is a fraction and how do you add fractions?",
                "A fraction represents parts of a whole. Find a common denominator, add the "
                "numerators, then simplify.",
            ),
            (
                "How do you solve a linear equation?",
                "Combine like terms, move variables to one side and numbers to the other, then "
                "divide by the variable's coefficient.",
            ),
        ],
    },
    "science": {
        Difficulty.HARD: [
            (
                "Explain quantum entanglement and its implications for quantum computing.",
                "Entangled particles share a quantum state that cannot be described "
                "independently; quantum algorithms rely on this correlation.",
            ),
            (
                "How does the electron transport chain contribute to ATP synthesis?",
                "Redox reactions pump protons across the inner mitochondrial membrane and the "
                "gradient drives ATP synthase.",
            ),
            (
                "Describe the relationship between entropy and the second law of thermodynamics.",
                "The total entropy of an isolated system never decreases, which makes many "
                "natural processes irreversible.",
            ),
            (
                "Explain the role of dark matter in galaxy formation.",
                "Dark matter supplies the gravitational scaffolding for galaxies and explains "
                "their rotation curves without interacting with light.",
            ),
        ],
        Difficulty.MEDIUM: [
            (
                "What is the difference between mitosis and meiosis?",
                "Mitosis makes two identical cells for growth and repair; meiosis makes four "
                "genetically different cells for reproduction.",
            ),
            (
                "Explain Newton's laws of motion.",
                "Inertia, F = ma, and every action has an equal and opposite reaction.",
            ),
            (
                "What is the structure of DNA?",
                "A double helix of nucleotides; A pairs with T and C pairs with G.",
            ),
            (
                "How does the greenhouse effect work?",
                "Atmospheric gases let sunlight through but absorb the infrared radiation the "
                "Earth emits, warming the planet.",
            ),
        ],
        Difficulty.EASY: [
            (
                "What are the three states of matter?",
                "Solid, liquid and gas.",
            ),
            (
                "What is photosynthesis?",
                "Plants turn sunlight, water and carbon dioxide into glucose and oxygen.",
            ),
            (
                "What is gravity?",
                "A force that attracts objects toward each other; on Earth it gives objects weight.",
            ),
            (
                "What are the main parts of a plant?",
                "Roots, stem, leaves and flowers.",
            ),
        ],
    },
    "history": {
        Difficulty.HARD: [
            (
                "Analyze the long-term impacts of the Industrial Revolution on modern society.",
                "It drove urbanization, labor reform and modern capitalism, and created lasting "
                "environmental challenges.",
            ),
            (
                "Compare and contrast the causes of World War I and World War II.",
                "WWI grew from nationalism, militarism and alliances; WWII from failed peace "
                "treaties, depression and totalitarian aggression.",
            ),
            (
                "Evaluate the significance of the Cold War in shaping modern international relations.",
                "It produced a bipolar order, proxy wars and an arms race whose legacy shapes "
                "current alliances and nuclear diplomacy.",
            ),
        ],
        Difficulty.MEDIUM: [
            (
                "What were the main causes of the American Revolution?",
                "Taxation without representation, British colonial policy and a growing desire "
                "for self-governance.",
            ),
            (
                "Explain the significance of the French Revolution.",
                "It overthrew the monarchy and spread ideas of liberty, equality and fraternity.",
            ),
        ],
        Difficulty.EASY: [
            (
                "Who was the first President of the United States?",
                "George Washington, serving from 1789 to 1797.",
            ),
            (
                "What was the Declaration of Independence?",
                "The 1776 document announcing the American colonies' separation from Britain.",
            ),
        ],
    },
    "literature": {
        Difficulty.HARD: [
            (
                "Analyze the themes of identity and alienation in modern literature.",
                "Modern works explore identity through psychological complexity, isolation and "
                "cultural displacement.",
            ),
        ],
        Difficulty.MEDIUM: [
            (
                "What are the main elements of Shakespearean tragedy?",
                "A tragic hero with a fatal flaw, internal and external conflict, and fate "
                "versus free will.",
            ),
        ],
        Difficulty.EASY: [
            (
                "What is the difference between poetry and prose?",
                "Poetry uses rhythm and structured lines; prose uses ordinary sentences and paragraphs.",
            ),
        ],
    },
    "geography": {
        Difficulty.HARD: [
            (
                "Explain the impact of climate change on global weather patterns.",
                "It shifts precipitation and ocean currents and intensifies extreme weather events.",
            ),
        ],
        Difficulty.MEDIUM: [
            (
                "What are the major tectonic plates and how do they interact?",
                "Pacific, North American, Eurasian, African and others meet at convergent, "
                "divergent and transform boundaries.",
            ),
        ],
        Difficulty.EASY: [
            (
                "What are the seven continents?",
                "North America, South America, Europe, Asia, Africa, Australia and Antarctica.",
            ),
        ],
    },
    "computer_science": {
        Difficulty.HARD: [
            (
                "Explain the concept of time complexity in algorithms.",
                "It describes how running time grows with input size, usually in Big O notation.",
            ),
            (
                "What is the difference between HTTP and HTTPS?",
                "HTTPS adds TLS encryption, giving authentication, integrity and confidentiality.",
            ),
        ],
        Difficulty.MEDIUM: [
            (
                "What is Object-Oriented Programming?",
                "A paradigm built on objects combining data and code, with encapsulation, "
                "inheritance, polymorphism and abstraction.",
            ),
        ],
        Difficulty.EASY: [
            (
                "What is a variable in programming?",
                "A named storage location holding data that can change while the program runs.",
            ),
        ],
    },
}

# {topic} is substituted with a readable form of the document name
DOCUMENT_TEMPLATES: list[QA] = [
    (
        "What are the main concepts discussed in {topic}?",
        "The main concepts are found in the document's key sections and themes.",
    ),
    (
        "How does {topic} relate to practical applications?",
        "Practical applications are covered in the document's examples and case studies.",
    ),
    (
        "What are the key findings or conclusions in {topic}?",
        "The key findings are summarized in the document's conclusion.",
    ),
    (
        "What evidence supports the main arguments in {topic}?",
        "Evidence appears throughout the document as data, examples and citations.",
    ),
    (
        "How does {topic} compare to related theories or concepts?",
        "Comparisons with related ideas appear in the review or analysis sections.",
    ),
    (
        "What are the limitations or challenges discussed in {topic}?",
        "Limitations are typically addressed in the discussion or conclusion.",
    ),
    (
        "What methodology is used to study {topic}?",
        "The methodology is detailed in the methods or approach section.",
    ),
    (
        "What are the future implications of {topic}?",
        "Implications and recommendations are discussed in the conclusion or future work.",
    ),
    (
        "What are the key terms and definitions in {topic}?",
        "Key terms are defined in the introduction or a terminology section.",
    ),
    (
        "What problems does {topic} address?",
        "Problem statements are outlined in the introduction or background.",
    ),
]


def cycle(items: list, count: int) -> list:
    """Return exactly ``count`` items, wrapping around ``items`` as needed."""
    if not items or count <= 0:
        return []
    return [items[i % len(items)] for i in range(count)]


def bank_questions(subject: str, difficulty: Difficulty, count: int) -> list[QA]:
    subject_bank = QUESTION_BANK.get(subject) or QUESTION_BANK[DEFAULT_SUBJECT]
    questions = subject_bank.get(difficulty) or subject_bank[Difficulty.MEDIUM]
    return cycle(questions, count)


def document_topic(name: Optional[str]) -> str:
    if not name:
        return "the document"
    stem = PurePath(name).stem if name.lower().endswith(".pdf") else name
    topic = re.sub(r"[_-]+", " ", stem).strip()
    return topic or "the document"


def document_questions(topic: str, count: int) -> list[QA]:
    filled = [(q.format(topic=topic), a) for q, a in DOCUMENT_TEMPLATES]
    return cycle(filled, count)
