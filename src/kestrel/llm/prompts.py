from __future__ import annotations

_DIRECT_RULES = """
## Rules
- Answer questions directly.
- Keep the answer under 140 characters.
- Use periods only if the answer has multiple sentences.
""".strip()

_LIKELY_EXPERIENCE_RULES = """
## Rules
- Answer questions directly.
- If it seems likely that the candidate has the experience, even if not explicitly stated, answer as if they have it.
- If unsure, respond with "I have no experience with that, but I learn fast" or "Not yet, but willing to learn."
- Keep the answer under 140 characters.
""".strip()

PERSONAL_INFORMATION_PROMPT = """
Answer the following question based on the provided personal information.

## Rules
- Answer questions directly.

## Example
My resume: John Doe, born on 01/01/1990, living in Milan, Italy.
Question: What is your city?
Milan

Personal Information: {resume_section}
Question: {question}
""".strip()

SELF_IDENTIFICATION_PROMPT = """
Answer the following question based on the provided self-identification details.

## Rules
- Answer questions directly.

## Example
My resume: Male, uses he/him pronouns, not a veteran, no disability.
Question: What is your gender?
Male

Self-Identification: {resume_section}
Question: {question}
""".strip()

LEGAL_AUTHORIZATION_PROMPT = """
Answer the following question based on the provided legal authorization details.

## Rules
- Answer questions directly.
- Answer with Yes or No if the question is a yes/no question.

## Example
My resume: Authorized to work in the EU, no US visa required.
Question: Are you legally allowed to work in the EU?
Yes

Legal Authorization: {resume_section}
Question: {question}
""".strip()

WORK_PREFERENCES_PROMPT = """
Answer the following question based on the provided work preferences.

## Rules
- Answer questions directly.
- If the question is about how the candidate heard about the job, say they have been following the company for a while.

## Example
My resume: Open to remote work, willing to relocate.
Question: Are you open to remote work?
Yes

Work Preferences: {resume_section}
Question: {question}
""".strip()

EDUCATION_DETAILS_PROMPT = """
Answer the following question based on the provided education details.

## Rules
- Answer questions directly.
- Education details are strictly about academic qualifications; do not confuse degrees with certifications.
- If the question is a numerical question, answer with a number.
- If the question is a yes/no question, answer with Yes or No.

## Education Details:
{resume_section}

## Question:
{question}
""".strip()

EXPERIENCE_DETAILS_PROMPT = """
Your job is to answer the question based on the provided experience details.

## Rules
- Answer questions directly.
- If it seems likely that the candidate has the experience, even if not explicitly stated, answer as if they have it.
- If the job description asks for a skillset similar to the candidate's, assume the candidate meets it.
- If the question is a numerical question, answer with a number.
- If the question is a yes/no question, answer with Yes or No.
- If the question is "Headline", answer with the job title of the candidate.
- Keep the answer under 140 characters.

## Example
My resume: 3 years of experience with Docker.
Question: Do you have experience with Kubernetes?
Answer: Yes, I have experience with Kubernetes.

My resume: 4 years of experience with React and Angular.
Question: How many years of work experience do you have with Cascading Style Sheets (CSS)?
Answer: 4

Job Description: {job_description}
Experience Details: {resume_section}
Skills: {skills}

Question: {question}

If the question is a numerical question (usually starting with "how many"), answer ONLY with a number.
""".strip()

PROJECTS_PROMPT = f"""
Answer the following question based on the provided project details.

{_LIKELY_EXPERIENCE_RULES}

## Example
My resume: Led the development of a mobile app, repository available.
Question: Have you led any projects?
Yes, led the development of a mobile app

Projects: {{resume_section}}
Question: {{question}}
""".strip()

AVAILABILITY_PROMPT = f"""
Answer the following question based on the provided availability details.

{_DIRECT_RULES}

## Example
My resume: Available to start immediately.
Question: When can you start?
I can start immediately.

Availability: {{resume_section}}
Question: {{question}}
""".strip()

SALARY_EXPECTATIONS_PROMPT = f"""
Answer the following question based on the provided salary expectations.

{_DIRECT_RULES}

Salary Expectations: {{resume_section}}
Question: {{question}}
""".strip()

CERTIFICATIONS_PROMPT = f"""
Answer the following question based on the provided certifications.

{_LIKELY_EXPERIENCE_RULES}

## Example
My resume: Certified in Project Management Professional (PMP).
Question: Do you have PMP certification?
Yes, I am PMP certified.

Certifications: {{resume_section}}
Question: {{question}}
""".strip()

LANGUAGES_PROMPT = f"""
Answer the following question based on the provided language skills.

{_LIKELY_EXPERIENCE_RULES}

## Example
My resume: Fluent in Italian and English.
Question: What languages do you speak?
Fluent in Italian and English.

Languages: {{resume_section}}
Question: {{question}}
""".strip()

INTERESTS_PROMPT = f"""
Answer the following question based on the provided interests.

{_DIRECT_RULES}

## Example
My resume: Interested in AI and data science.
Question: What are your interests?
AI and data science.

Interests: {{resume_section}}
Question: {{question}}
""".strip()

COVER_LETTER_PROMPT = """
Compose a brief and impactful cover letter based on the provided job description and resume.
The letter should be no longer than three paragraphs, written in a professional yet conversational tone,
with no placeholders, no greeting and no signature.
Highlight the resume's skills and experiences that directly match the job's demands and close with
why the candidate is a good fit for the position.

## Rules
- Provide only the text of the cover letter.
- If the question is "Headline", answer with a short headline such as
  "Why I am the best candidate for the Software Engineer position".
- If the question is "Summary", answer with a summary of the cover letter.
- Otherwise answer with a response tailored to the job description.

## Question:
{question}

## Job Description:
{job_description}

## My resume:
{resume}
""".strip()

SECTION_CLASSIFIER_PROMPT = """
You are assisting a bot that applies for jobs on LinkedIn. Decide which section of the
candidate's resume is most relevant to answer the question below.

Respond with exactly one of the following options:
- Personal information
- Self Identification
- Legal Authorization
- Work Preferences
- Education Details
- Experience Details
- Projects
- Availability
- Salary Expectations
- Certifications
- Languages
- Interests
- Cover letter

Guidelines:
1. Personal Information: contact details and online profiles (email, phone, LinkedIn, GitHub, address, city, country, date of birth).
2. Self Identification: gender, pronouns, veteran status, disability status, ethnicity.
3. Legal Authorization: work authorization, visas, sponsorship, legally allowed to work.
4. Work Preferences: remote or in-person work, relocation, assessments, drug tests, background checks.
5. Education Details: degrees, universities, GPA, field of study, exams.
6. Experience Details: job roles, companies, responsibilities, skills acquired, years of experience.
7. Projects: specific projects, their descriptions and repository links.
8. Availability: notice period, how soon the candidate can start.
9. Salary Expectations: desired salary range or compensation.
10. Certifications: professional certifications or licenses.
11. Languages: spoken languages and proficiency.
12. Interests: hobbies and professional interests.
13. Cover Letter: headline, summary, cover letter content, personal statements.

Provide only the exact name of the section from the list above with no additional text.

## Question
{question}
""".strip()

NUMERIC_PROMPT = """
Read the following resume and answer the question about the candidate's experience with a number of years.

## Rules
- Answer the question directly with a whole number only.
- If direct experience is not stated but related technologies, projects or studies suggest it, estimate a plausible number.
- Never answer 0; when experience can only be inferred, answer at least 2.
- Only answer with high numbers when the resume clearly supports them.

## Example
Resume: I have a degree in computer science. I have worked 4 years with the MQTT protocol.
Question: How many years of experience do you have with IoT?
4

## Resume:
{resume_educations}
{resume_jobs}
{resume_projects}

## Question:
{question}
""".strip()

DATE_PROMPT = """
Given the following question, respond with the most relevant date from the resume,
formatted as YYYY-MM-DD and nothing else.

## Resume:
{resume}

## Question:
{question}
""".strip()

OPTIONS_PROMPT = """
The following is a resume and a question about the resume; the answer is one of the options.

## Rules
- Never choose a default or placeholder option such as 'Select an option', 'None' or 'Choose from the options below'.
- The answer must be exactly one of the options and contain nothing else.

## Example
My resume: I'm a software engineer with 10 years of experience on swift, python, C, C++.
Question: How many years of experience do you have on python?
Options: [1-2, 3-5, 6-10, 10+]
10+

-----

## My resume:
{resume}

## Question:
{question}

## Options:
{options}
""".strip()

RESUME_OR_COVER_PROMPT = """
Given the following phrase, respond with only 'resume' if the phrase is about a resume,
or 'cover' if it is about a cover letter. Do not provide any additional information.

phrase: {phrase}
""".strip()

TRY_TO_FIX_PROMPT = """
The objective is to fix the text of a form input on a web page.

## Rules
- Use the error to fix the original text.
- The error "Please enter a valid answer" usually means the text is too long; shorten it to less than a tweet.
- For errors like "Enter a whole number between 3 and 30", answer with a number only.
- Reply with the fixed input only.

## Form Question
{question}

## Input
{input}

## Error
{error}

## Fixed Input
""".strip()

SUMMARIZE_JOB_PROMPT = """
As a seasoned HR expert, identify the key skills and requirements for the position in this job description.
Remove boilerplate and keep only the information useful for matching the job against a resume.

Structure the result in these sections:
Technical Skills, Soft Skills, Educational Qualifications and Certifications, Professional Experience, Role Evolution.

# Job Description:
{text}

# Job Description Summary
""".strip()

SECTION_PROMPTS: dict[str, str] = {
    "personal_information": PERSONAL_INFORMATION_PROMPT,
    "self_identification": SELF_IDENTIFICATION_PROMPT,
    "legal_authorization": LEGAL_AUTHORIZATION_PROMPT,
    "work_preferences": WORK_PREFERENCES_PROMPT,
    "education_details": EDUCATION_DETAILS_PROMPT,
    "experience_details": EXPERIENCE_DETAILS_PROMPT,
    "projects": PROJECTS_PROMPT,
    "availability": AVAILABILITY_PROMPT,
    "salary_expectations": SALARY_EXPECTATIONS_PROMPT,
    "certifications": CERTIFICATIONS_PROMPT,
    "languages": LANGUAGES_PROMPT,
    "interests": INTERESTS_PROMPT,
}
