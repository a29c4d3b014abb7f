"""
Static career-track catalog: on-campus programs, off-campus companies,
competitive exams and popular resume targets.

Field names are camelCase because these dicts are returned to the client
as-is. College-specific placements come from the `placements` table
instead (see placement_service).
"""

from typing import List, Optional


def _rounds(*pairs) -> List[dict]:
    return [{"name": name, "type": kind} for name, kind in pairs]


# ============================================================
# ON-CAMPUS PROGRAMS
# ============================================================

ON_CAMPUS_PROGRAMS = [
    {
        "id": "oc-1",
        "companyName": "Tata Consultancy Services",
        "logo": "🏢",
        "roleTitle": "System Engineer",
        "package": "₹3.6 LPA",
        "eligibilityCriteria": "CGPA >= 6.0, No active backlogs",
        "requiredSkills": ["Java", "SQL", "Problem Solving", "Communication"],
        "driveDate": "2026-03-15",
        "registrationDeadline": "2026-03-01",
        "status": "Upcoming",
        "rounds": _rounds(
            ("Aptitude Test", "Aptitude"),
            ("Coding Round", "Coding"),
            ("Technical Interview", "Technical"),
            ("HR Interview", "HR"),
        ),
        "totalApplicants": 450,
    },
    {
        "id": "oc-2",
        "companyName": "Infosys",
        "logo": "💼",
        "roleTitle": "Systems Engineer",
        "package": "₹3.8 LPA",
        "eligibilityCriteria": "CGPA >= 6.0, All branches eligible",
        "requiredSkills": ["Python", "Java", "DBMS", "Communication"],
        "driveDate": "2026-03-22",
        "registrationDeadline": "2026-03-10",
        "status": "Upcoming",
        "rounds": _rounds(
            ("Online Assessment", "Aptitude"),
            ("Coding Test", "Coding"),
            ("Technical + HR", "Technical"),
        ),
        "totalApplicants": 380,
    },
    {
        "id": "oc-3",
        "companyName": "Wipro",
        "logo": "🌐",
        "roleTitle": "Project Engineer",
        "package": "₹3.5 LPA",
        "eligibilityCriteria": "CGPA >= 5.5, No active backlogs",
        "requiredSkills": ["C/C++", "Java", "SQL", "Aptitude"],
        "driveDate": "2026-02-28",
        "registrationDeadline": "2026-02-20",
        "status": "Ongoing",
        "rounds": _rounds(
            ("Online Test", "Aptitude"),
            ("Coding Assessment", "Coding"),
            ("Interview", "Technical"),
        ),
        "totalApplicants": 520,
    },
    {
        "id": "oc-4",
        "companyName": "Cognizant",
        "logo": "⚡",
        "roleTitle": "Programmer Analyst",
        "package": "₹4.0 LPA",
        "eligibilityCriteria": "CGPA >= 6.5, CS/IT branches",
        "requiredSkills": ["Java", "Python", "Data Structures", "SQL"],
        "driveDate": "2026-04-05",
        "registrationDeadline": "2026-03-25",
        "status": "Upcoming",
        "rounds": _rounds(
            ("Aptitude + Coding", "Aptitude"),
            ("Technical Interview", "Technical"),
            ("HR Round", "HR"),
        ),
    },
]


# ============================================================
# OFF-CAMPUS COMPANIES
# ============================================================

OFF_CAMPUS_COMPANIES = [
    {
        "id": "comp-1",
        "name": "Google",
        "logo": "🔍",
        "requiredSkills": ["Data Structures", "Algorithms", "System Design", "Python", "Problem Solving"],
        "interviewRounds": _rounds(
            ("Online Assessment", "Coding"),
            ("Phone Screen", "Technical"),
            ("Onsite Round 1", "Coding"),
            ("Onsite Round 2", "Technical"),
            ("Behavioral", "HR"),
        ),
        "averagePackage": "₹30+ LPA",
        "roleType": "SDE",
        "difficulty": "Hard",
        "description": "One of the top tech companies globally. Known for challenging coding interviews focused on algorithms and system design.",
        "website": "https://careers.google.com",
        "locations": ["Bangalore", "Hyderabad", "Gurgaon"],
    },
    {
        "id": "comp-2",
        "name": "Microsoft",
        "logo": "🪟",
        "requiredSkills": ["Data Structures", "Algorithms", "C++", "System Design", "OOP"],
        "interviewRounds": _rounds(
            ("Online Assessment", "Coding"),
            ("Technical Round 1", "Technical"),
            ("Technical Round 2", "Technical"),
            ("Hiring Manager", "HR"),
        ),
        "averagePackage": "₹28+ LPA",
        "roleType": "SDE",
        "difficulty": "Hard",
        "description": "Global technology leader. Interviews focus on DSA, system design, and cultural fit.",
        "website": "https://careers.microsoft.com",
        "locations": ["Hyderabad", "Bangalore", "Noida"],
    },
    {
        "id": "comp-3",
        "name": "Amazon",
        "logo": "📦",
        "requiredSkills": ["Data Structures", "Algorithms", "System Design", "Java", "Leadership Principles"],
        "interviewRounds": _rounds(
            ("Online Assessment", "Coding"),
            ("Technical Round 1", "Coding"),
            ("Technical Round 2", "Technical"),
            ("Bar Raiser", "HR"),
        ),
        "averagePackage": "₹26+ LPA",
        "roleType": "SDE",
        "difficulty": "Hard",
        "description": "E-commerce and cloud giant. Strong focus on Leadership Principles alongside technical skills.",
        "website": "https://amazon.jobs",
        "locations": ["Hyderabad", "Bangalore", "Chennai"],
    },
    {
        "id": "comp-4",
        "name": "Flipkart",
        "logo": "🛒",
        "requiredSkills": ["Data Structures", "Algorithms", "Java", "System Design", "SQL"],
        "interviewRounds": _rounds(
            ("Online Coding Test", "Coding"),
            ("Machine Coding", "Coding"),
            ("Problem Solving", "Technical"),
            ("Hiring Manager", "HR"),
        ),
        "averagePackage": "₹22+ LPA",
        "roleType": "SDE",
        "difficulty": "Hard",
        "description": "India's leading e-commerce platform. Focuses on coding, machine coding, and system design.",
        "website": "https://www.flipkartcareers.com",
        "locations": ["Bangalore"],
    },
    {
        "id": "comp-5",
        "name": "Deloitte",
        "logo": "🔷",
        "requiredSkills": ["SQL", "Python", "Excel", "Communication", "Business Analysis"],
        "interviewRounds": _rounds(
            ("Aptitude Test", "Aptitude"),
            ("Group Discussion", "Group Discussion"),
            ("Technical Interview", "Technical"),
            ("HR Interview", "HR"),
        ),
        "averagePackage": "₹8 LPA",
        "roleType": "Analyst",
        "difficulty": "Medium",
        "description": "Big 4 consulting firm. Interviews include aptitude, GD, and technical skills.",
        "website": "https://www2.deloitte.com/careers",
        "locations": ["Mumbai", "Bangalore", "Hyderabad", "Pune"],
    },
    {
        "id": "comp-6",
        "name": "Accenture",
        "logo": "🅰️",
        "requiredSkills": ["Java", "Python", "SQL", "Communication", "Problem Solving"],
        "interviewRounds": _rounds(
            ("Aptitude + Coding", "Aptitude"),
            ("Technical Interview", "Technical"),
            ("HR Round", "HR"),
        ),
        "averagePackage": "₹4.5 LPA",
        "roleType": "Associate Software Engineer",
        "difficulty": "Easy",
        "description": "Global IT services company. Relatively easier interviews focused on fundamentals.",
        "website": "https://www.accenture.com/careers",
        "locations": ["Pan India"],
    },
    {
        "id": "comp-7",
        "name": "Paytm",
        "logo": "💰",
        "requiredSkills": ["JavaScript", "React", "Node.js", "MongoDB", "REST APIs"],
        "interviewRounds": _rounds(
            ("Online Test", "Coding"),
            ("Technical Round 1", "Technical"),
            ("Technical Round 2", "Technical"),
            ("HR Round", "HR"),
        ),
        "averagePackage": "₹12 LPA",
        "roleType": "SDE",
        "difficulty": "Medium",
        "description": "Leading fintech company. Focuses on web technologies and problem-solving skills.",
        "website": "https://paytm.com/careers",
        "locations": ["Noida", "Bangalore"],
    },
    {
        "id": "comp-8",
        "name": "Zoho",
        "logo": "📊",
        "requiredSkills": ["C/C++", "Data Structures", "Problem Solving", "Logic"],
        "interviewRounds": _rounds(
            ("Aptitude Test", "Aptitude"),
            ("Programming Round", "Coding"),
            ("Advanced Programming", "Coding"),
            ("Technical + HR", "Technical"),
        ),
        "averagePackage": "₹6.5 LPA",
        "roleType": "Member Technical Staff",
        "difficulty": "Medium",
        "description": "Product-based company known for extensive programming rounds. Strong C/C++ focus.",
        "website": "https://www.zoho.com/careers.html",
        "locations": ["Chennai", "Tenkasi"],
    },
    {
        "id": "comp-9",
        "name": "Razorpay",
        "logo": "💳",
        "requiredSkills": ["Go", "Python", "Microservices", "System Design", "Distributed Systems"],
        "interviewRounds": _rounds(
            ("Coding Challenge", "Coding"),
            ("System Design", "Technical"),
            ("Cultural Fit", "HR"),
        ),
        "averagePackage": "₹18 LPA",
        "roleType": "SDE",
        "difficulty": "Hard",
        "description": "Top fintech startup. Focus on backend engineering, distributed systems, and payments.",
        "website": "https://razorpay.com/careers",
        "locations": ["Bangalore"],
    },
    {
        "id": "comp-10",
        "name": "Capgemini",
        "logo": "🔵",
        "requiredSkills": ["Java", "SQL", "Communication", "Aptitude", "Team Work"],
        "interviewRounds": _rounds(
            ("Online Assessment", "Aptitude"),
            ("Technical Interview", "Technical"),
            ("HR Interview", "HR"),
        ),
        "averagePackage": "₹3.8 LPA",
        "roleType": "Analyst",
        "difficulty": "Easy",
        "description": "Global IT services firm with a strong presence in India. Straightforward interview process.",
        "website": "https://www.capgemini.com/careers",
        "locations": ["Pan India"],
    },
]


# Quick picks for resume analysis; requirements are generated on first use
POPULAR_COMPANIES = [
    {"id": "custom_google", "name": "Google", "roles": ["SDE", "SWE", "ML Engineer", "Data Analyst"]},
    {"id": "custom_microsoft", "name": "Microsoft", "roles": ["SDE", "SWE", "PM", "Data Scientist"]},
    {"id": "custom_amazon", "name": "Amazon", "roles": ["SDE", "SWE", "Data Engineer", "DevOps Engineer"]},
    {"id": "custom_apple", "name": "Apple", "roles": ["SDE", "iOS Developer", "ML Engineer"]},
    {"id": "custom_meta", "name": "Meta", "roles": ["SDE", "SWE", "ML Engineer", "Data Scientist"]},
    {"id": "custom_netflix", "name": "Netflix", "roles": ["SDE", "SWE", "Data Engineer"]},
    {"id": "custom_flipkart", "name": "Flipkart", "roles": ["SDE", "Backend Engineer", "Data Analyst"]},
    {"id": "custom_uber", "name": "Uber", "roles": ["SDE", "SWE", "Backend Engineer"]},
    {"id": "custom_adobe", "name": "Adobe", "roles": ["SDE", "SWE", "MTS", "Research Engineer"]},
    {"id": "custom_salesforce", "name": "Salesforce", "roles": ["SDE", "SWE", "MTS"]},
    {"id": "custom_goldman_sachs", "name": "Goldman Sachs", "roles": ["Analyst", "SDE", "Quant Developer"]},
    {"id": "custom_jpmorgan", "name": "JP Morgan", "roles": ["SDE", "Analyst", "Quant Developer"]},
    {"id": "custom_deloitte", "name": "Deloitte", "roles": ["Analyst", "Consultant", "SDE"]},
    {"id": "custom_oracle", "name": "Oracle", "roles": ["SDE", "Application Developer", "MTS"]},
    {"id": "custom_samsung", "name": "Samsung", "roles": ["SDE", "Embedded Engineer", "Research Engineer"]},
]


# ============================================================
# COMPETITIVE EXAMS
# ============================================================

def _topic(topic_id: str, name: str, weight: int, subtopics: List[str]) -> dict:
    return {"id": topic_id, "name": name, "weight": weight, "subtopics": subtopics}


COMPETITIVE_EXAMS = [
    {
        "id": "gate",
        "name": "GATE",
        "fullName": "Graduate Aptitude Test in Engineering",
        "icon": "🎓",
        "description": "National-level exam for admission to M.Tech/M.E. programs in IITs, NITs, and other top institutes. Also used for PSU recruitment.",
        "eligibility": [
            "Bachelor's degree in Engineering/Technology (4 years)",
            "Master's degree in any branch of Science/Mathematics/Statistics/Computer Applications",
            "Students in final year of qualifying degree can also apply",
            "No age limit",
        ],
        "syllabusTopics": [
            _topic("gate-1", "Engineering Mathematics", 15,
                   ["Linear Algebra", "Calculus", "Differential Equations", "Probability & Statistics", "Numerical Methods"]),
            _topic("gate-2", "Digital Logic", 8,
                   ["Boolean Algebra", "Combinational Circuits", "Sequential Circuits", "Number Representations"]),
            _topic("gate-3", "Computer Organization", 8,
                   ["Machine Instructions", "Addressing Modes", "ALU", "CPU Design", "Memory Hierarchy", "I/O Interface"]),
            _topic("gate-4", "Programming & Data Structures", 15,
                   ["C Programming", "Recursion", "Arrays", "Stacks", "Queues", "Linked Lists", "Trees", "Graphs", "Hashing"]),
            _topic("gate-5", "Algorithms", 10,
                   ["Searching", "Sorting", "Graph Algorithms", "Dynamic Programming", "Greedy", "Asymptotic Analysis"]),
            _topic("gate-6", "Theory of Computation", 8,
                   ["Regular Languages", "Context-Free Languages", "Turing Machines", "Undecidability"]),
            _topic("gate-7", "Compiler Design", 6,
                   ["Lexical Analysis", "Parsing", "Syntax-Directed Translation", "Code Generation"]),
            _topic("gate-8", "Operating Systems", 10,
                   ["Processes", "Threading", "Scheduling", "Synchronization", "Memory Management", "File Systems"]),
            _topic("gate-9", "Databases", 10,
                   ["ER Model", "Relational Model", "SQL", "Normalization", "Transactions", "Indexing"]),
            _topic("gate-10", "Computer Networks", 10,
                   ["OSI Model", "TCP/IP", "Network Security", "Application Layer Protocols"]),
        ],
        "examDate": "February 2027",
        "registrationDeadline": "October 2026",
        "examDuration": "3 hours",
        "totalMarks": 100,
        "passingCriteria": "Qualifying marks vary by category (General: ~25, OBC: ~22.5, SC/ST: ~16.6)",
        "officialWebsite": "https://gate.iitb.ac.in",
        "category": "Engineering",
    },
    {
        "id": "cat",
        "name": "CAT",
        "fullName": "Common Admission Test",
        "icon": "📈",
        "description": "National-level entrance exam for MBA admission to IIMs and other top B-schools in India.",
        "eligibility": [
            "Bachelor's degree with at least 50% marks (45% for SC/ST/PWD)",
            "Final year students in qualifying degree can apply",
            "No age limit",
            "Degree in any discipline accepted",
        ],
        "syllabusTopics": [
            _topic("cat-1", "Verbal Ability & Reading Comprehension", 34,
                   ["Reading Comprehension", "Para Jumbles", "Para Summary", "Sentence Completion", "Odd One Out"]),
            _topic("cat-2", "Data Interpretation & Logical Reasoning", 32,
                   ["Data Tables", "Graphs & Charts", "Caselets", "Puzzles", "Arrangements", "Logical Connectives"]),
            _topic("cat-3", "Quantitative Aptitude", 34,
                   ["Number Systems", "Algebra", "Geometry", "Mensuration", "Probability",
                    "Permutation & Combination", "Time & Work"]),
        ],
        "examDate": "November 2026",
        "registrationDeadline": "September 2026",
        "examDuration": "2 hours",
        "totalMarks": 198,
        "passingCriteria": "Percentile-based selection. 99+ percentile for top IIMs.",
        "officialWebsite": "https://iimcat.ac.in",
        "category": "Management",
    },
    {
        "id": "cet",
        "name": "MHT CET",
        "fullName": "Maharashtra Common Entrance Test",
        "icon": "📝",
        "description": "State-level entrance exam for admission to engineering, pharmacy, and other professional courses in Maharashtra.",
        "eligibility": [
            "Passed HSC (12th) or equivalent with Physics, Chemistry, and Mathematics",
            "Indian national",
            "No age limit for Engineering",
            "Maharashtra domicile preferred for state quota seats",
        ],
        "syllabusTopics": [
            _topic("cet-1", "Mathematics", 50,
                   ["Trigonometry", "Algebra", "Calculus", "Coordinate Geometry", "Statistics", "Probability"]),
            _topic("cet-2", "Physics", 25,
                   ["Mechanics", "Thermodynamics", "Electrostatics", "Magnetism", "Optics", "Modern Physics"]),
            _topic("cet-3", "Chemistry", 25,
                   ["Organic Chemistry", "Inorganic Chemistry", "Physical Chemistry", "Environmental Chemistry"]),
        ],
        "examDate": "May 2026",
        "registrationDeadline": "March 2026",
        "examDuration": "3 hours",
        "totalMarks": 200,
        "passingCriteria": "Merit-based rank list. Higher percentile needed for top colleges.",
        "officialWebsite": "https://cetcell.mahacet.org",
        "category": "Engineering",
    },
    {
        "id": "gre",
        "name": "GRE",
        "fullName": "Graduate Record Examinations",
        "icon": "🌍",
        "description": "Standardized test for admission to graduate schools worldwide. Accepted by thousands of universities globally.",
        "eligibility": [
            "No specific eligibility criteria",
            "Available to anyone planning to attend graduate school",
            "Typically required for MS programs abroad (especially US, Canada, UK)",
            "Valid for 5 years from test date",
        ],
        "syllabusTopics": [
            _topic("gre-1", "Verbal Reasoning", 33,
                   ["Reading Comprehension", "Text Completion", "Sentence Equivalence", "Vocabulary in Context"]),
            _topic("gre-2", "Quantitative Reasoning", 34,
                   ["Arithmetic", "Algebra", "Geometry", "Data Analysis", "Word Problems"]),
            _topic("gre-3", "Analytical Writing", 33,
                   ["Analyze an Issue", "Analyze an Argument", "Essay Structure", "Critical Thinking"]),
        ],
        "examDate": "Year-round (computer-based)",
        "registrationDeadline": "Register at least 4 weeks before preferred date",
        "examDuration": "3 hours 45 minutes",
        "totalMarks": 340,
        "passingCriteria": "No pass/fail. Score range: 260-340. Target 320+ for top universities.",
        "officialWebsite": "https://www.ets.org/gre",
        "category": "General",
    },
]


def find_exam(exam_id: str) -> Optional[dict]:
    return next((e for e in COMPETITIVE_EXAMS if e["id"] == exam_id), None)


def exams_by_category(category: str) -> List[dict]:
    return [e for e in COMPETITIVE_EXAMS if e["category"] == category]
