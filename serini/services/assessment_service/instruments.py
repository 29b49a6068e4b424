"""Malaysian-validated screening instrument catalog.

Static, read-only and built once at import time. Every Instrument checks
its own scoring bands in __post_init__, so a malformed catalog fails at
process start instead of silently mis-scoring a user.

Sources: PHQ-9 (Minda 9 Malay validation), AST, SEGIST, Malaysian OCD
screening tool, Senarai Semak PTSD, YSAS, adapted prodromal psychosis
screen, sexual behaviour screen, Instrumen Saringan Tekanan Dalam
Perkahwinan.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class InstrumentQuestion:
    id: str
    text: str
    text_localized: str


@dataclass(frozen=True)
class ScaleOption:
    value: int
    label: str
    label_localized: str


@dataclass(frozen=True)
class ScoringRange:
    """Inclusive [min, max] score band."""
    min: int
    max: int
    severity: str
    severity_localized: str

    def contains(self, score: int) -> bool:
        return self.min <= score <= self.max


@dataclass(frozen=True)
class Instrument:
    """A standardized questionnaire with fixed questions, scale and bands.

    Invariants (checked on creation):
    - scoring ranges partition [0, max_score] with no gaps or overlaps
    - max_score equals question count times the highest scale value
    """
    type: str
    name: str
    name_localized: str
    questions: Tuple[InstrumentQuestion, ...]
    scale_options: Tuple[ScaleOption, ...]
    scoring_ranges: Tuple[ScoringRange, ...]
    max_score: int
    is_premium: bool
    timeframe: str = ""
    timeframe_localized: str = ""

    def __post_init__(self):
        ranges = sorted(self.scoring_ranges, key=lambda r: r.min)
        expected_min = 0
        for band in ranges:
            if band.min != expected_min:
                raise ValueError(
                    f"{self.type}: scoring range starting at {band.min} leaves a gap "
                    f"or overlap (expected {expected_min})"
                )
            if band.max < band.min:
                raise ValueError(f"{self.type}: empty scoring range {band.min}-{band.max}")
            expected_min = band.max + 1
        if expected_min - 1 != self.max_score:
            raise ValueError(
                f"{self.type}: scoring ranges end at {expected_min - 1}, "
                f"max score is {self.max_score}"
            )
        if len(self.questions) * self.max_scale_value != self.max_score:
            raise ValueError(
                f"{self.type}: {len(self.questions)} questions x {self.max_scale_value} "
                f"does not equal max score {self.max_score}"
            )

    @property
    def question_ids(self) -> List[str]:
        return [q.id for q in self.questions]

    @property
    def scale_values(self) -> List[int]:
        return [o.value for o in self.scale_options]

    @property
    def max_scale_value(self) -> int:
        return max(self.scale_values)

    def find_range(self, score: int) -> Optional[ScoringRange]:
        """Linear first-match lookup of the band containing score."""
        for band in self.scoring_ranges:
            if band.contains(score):
                return band
        return None


def _questions(*items: Tuple[str, str, str]) -> Tuple[InstrumentQuestion, ...]:
    return tuple(InstrumentQuestion(id=i, text=t, text_localized=m) for i, t, m in items)


def _scale(*items: Tuple[int, str, str]) -> Tuple[ScaleOption, ...]:
    return tuple(ScaleOption(value=v, label=l, label_localized=m) for v, l, m in items)


def _ranges(*items: Tuple[int, int, str, str]) -> Tuple[ScoringRange, ...]:
    return tuple(
        ScoringRange(min=lo, max=hi, severity=s, severity_localized=m) for lo, hi, s, m in items
    )


# PHQ-9 response options (0-3)
PHQ_SCALE = _scale(
    (0, "Not at all", "Tidak langsung"),
    (1, "Several days", "Beberapa hari"),
    (2, "More than half the days", "Lebih separuh hari"),
    (3, "Nearly every day", "Hampir setiap hari"),
)

# Malaysian AST / general frequency scale (0-4)
MY_FREQUENCY_SCALE = _scale(
    (0, "Never", "Tidak Pernah"),
    (1, "Rarely", "Sekali-sekala"),
    (2, "Sometimes", "Selalu"),
    (3, "Fairly often", "Kerap"),
    (4, "Always", "Amat Kerap"),
)

PTSD_SCALE = _scale(
    (0, "Not at all", "Tidak langsung"),
    (1, "A little", "Sedikit terganggu"),
    (2, "Moderately", "Sederhana terganggu"),
    (3, "Quite a bit", "Agak terganggu"),
    (4, "Extremely", "Sangat terganggu"),
)

SEGIST_SCALE = _scale(
    (0, "Never", "Tidak pernah"),
    (1, "More than a month ago", "Lebih daripada sebulan"),
    (2, "More than a week ago", "Lebih daripada seminggu"),
    (3, "More than 3 times a week", "Lebih daripada 3 kali seminggu"),
    (4, "Almost every day", "Hampir setiap hari"),
)

YSAS_SCALE = _scale(
    (0, "Never", "Tidak pernah"),
    (1, "Sometimes", "Kadang-kadang"),
    (2, "Often", "Selalu"),
    (3, "Frequently", "Kerap"),
    (4, "Very frequently", "Amat kerap"),
)

OCD_SCALE = _scale(
    (0, "Not at all", "Tiada langsung"),
    (1, "A little", "Sedikit sahaja"),
    (2, "Moderately", "Sederhana"),
    (3, "A lot", "Kebanyakan"),
    (4, "Extremely", "Sangat"),
)

AGREEMENT_SCALE = _scale(
    (0, "Always agree", "Sentiasa bersetuju"),
    (1, "Almost always agree", "Hampir selalu bersetuju"),
    (2, "Sometimes disagree", "Kadang-kadang tidak bersetuju"),
    (3, "Frequently disagree", "Kerap tidak bersetuju"),
    (4, "Almost always disagree", "Hampir selalu tidak bersetuju"),
    (5, "Always disagree", "Sentiasa tidak bersetuju"),
)


DEPRESSION = Instrument(
    type="depression",
    name="Patient Health Questionnaire (PHQ-9)",
    name_localized="Soal Selidik Kesihatan Pesakit (PHQ-9)",
    questions=_questions(
        ("phq9_1", "Little interest or pleasure in doing things",
         "Kurang minat atau keseronokan dalam melakukan perkara"),
        ("phq9_2", "Feeling down, depressed, or hopeless",
         "Berasa sedih, murung, atau tiada harapan"),
        ("phq9_3", "Trouble falling or staying asleep, or sleeping too much",
         "Susah tidur atau terus tidur, atau tidur terlalu banyak"),
        ("phq9_4", "Feeling tired or having little energy",
         "Berasa letih atau kurang tenaga"),
        ("phq9_5", "Poor appetite or overeating",
         "Kurang selera makan atau makan berlebihan"),
        ("phq9_6", "Feeling bad about yourself - or that you are a failure or have let "
                   "yourself or your family down",
         "Berasa buruk tentang diri sendiri - atau anda gagal atau mengecewakan diri "
         "sendiri atau keluarga"),
        ("phq9_7", "Trouble concentrating on things, such as reading the newspaper or "
                   "watching television",
         "Susah menumpukan perhatian pada perkara, seperti membaca surat khabar atau "
         "menonton televisyen"),
        ("phq9_8", "Moving or speaking so slowly that other people could have noticed. "
                   "Or the opposite - being so fidgety or restless",
         "Bergerak atau bercakap dengan perlahan sehingga orang lain perasan. Atau "
         "sebaliknya - begitu gelisah"),
        ("phq9_9", "Thoughts that you would be better off dead, or of hurting yourself",
         "Fikiran bahawa anda lebih baik mati, atau menyakiti diri sendiri"),
    ),
    scale_options=PHQ_SCALE,
    scoring_ranges=_ranges(
        (0, 4, "Minimal/None", "Minimum/Tiada"),
        (5, 9, "Mild", "Ringan"),
        (10, 14, "Moderate", "Sederhana"),
        (15, 19, "Moderately Severe", "Sederhana Teruk"),
        (20, 27, "Severe", "Teruk"),
    ),
    max_score=27,
    is_premium=False,
    timeframe="Over the last 2 weeks, how often have you been bothered by any of the "
              "following problems?",
    timeframe_localized="Dalam 2 minggu yang lepas, berapa kerap anda terganggu oleh "
                        "mana-mana masalah berikut?",
)

ANXIETY = Instrument(
    type="anxiety",
    name="Anxiety Screening Tool (AST)",
    name_localized="Ujian Saringan Anzieti (AST)",
    questions=_questions(
        ("ast_1", "I feel nervous", "Saya rasa gelisah"),
        ("ast_2", "I am afraid of something bad will happen to me",
         "Saya takut sesuatu yang buruk akan menimpa diri saya"),
        ("ast_3", "I am feeling of choking", "Saya rasa seperti tercekik"),
        ("ast_4", "I don't feel calm", "Saya tak berasa tenang"),
        ("ast_5", "I have the feeling of shakiness", "Saya berasa gementar"),
        ("ast_6", "I feel rushing without any reason", "Saya rasa tergesa-gesa tanpa sebab yang jelas"),
        ("ast_7", "I feel dizzy", "Saya rasa seperti hendak pitam"),
        ("ast_8", "I feel flushed on my face", "Saya rasa muka saya hangat"),
        ("ast_9", "I feel worried", "Saya rasa bimbang"),
        ("ast_10", "I feel unsteady", "Saya rasa tidak tenteram"),
        ("ast_11", "I panic easily", "Saya mudah cemas"),
        ("ast_12", "I am unable to relax", "Saya tidak boleh rileks"),
        ("ast_13", "I think I will be hit by some disaster",
         "Saya rasa sesuatu malapetaka akan melanda saya"),
        ("ast_14", "I am always worried", "Saya sentiasa risau"),
        ("ast_15", "I am always panic", "Saya selalu panik"),
        ("ast_16", "I am always restless/uneasy", "Saya sentiasa resah"),
        ("ast_17", "My heart is pounding", "Hati saya berdebar-debar"),
        ("ast_18", "I have stomach ache", "Saya rasa perut saya tidak selesa"),
        ("ast_19", "I am shivering", "Saya rasa menggigil"),
    ),
    scale_options=MY_FREQUENCY_SCALE,
    scoring_ranges=_ranges(
        (0, 19, "Low", "Rendah"),
        (20, 38, "Moderate", "Sederhana"),
        (39, 57, "High", "Tinggi"),
        (58, 76, "Very High", "Sangat Tinggi"),
    ),
    max_score=76,
    is_premium=False,
    timeframe="Please indicate how often you have experienced the following:",
    timeframe_localized="Sila nyatakan berapa kerap anda mengalami perkara berikut:",
)

INSOMNIA = Instrument(
    type="insomnia",
    name="SEGIST Insomnia Screening",
    name_localized="Ujian Saringan Insomnia SEGIST",
    questions=_questions(
        ("seg_1", "How often do you have difficulty sleeping?",
         "Berapa kerap anda mengalami kesukaran tidur?"),
        ("seg_2", "How often do you feel sleepy while working?",
         "Berapa kerap anda berasa mengantuk ketika bekerja?"),
        ("seg_3", "Do you have difficulty waking up in the morning?",
         "Adakah anda mengalami kesukaran untuk bangun pada waktu pagi?"),
        ("seg_4", "Do you feel restless at night?", "Adakah anda berasa gelisah pada waktu malam?"),
        ("seg_5", "Do you feel restless in the morning?", "Adakah anda berasa gelisah pada waktu pagi?"),
        ("seg_6", "Is your breathing disturbed during sleep?",
         "Adakah pernafasan anda terganggu pada waktu tidur?"),
        ("seg_7", "Do you snore loudly?", "Adakah anda berdengkur dengan kuat?"),
        ("seg_8", "Do you feel hot at night?", "Adakah anda berasa panas di malam hari?"),
        ("seg_9", "Do you feel cold at night?", "Adakah anda berasa sejuk di malam hari?"),
        ("seg_10", "Do you often have nightmares?", "Adakah anda sering mengalami mimpi ngeri?"),
        ("seg_11", "Do you take sleeping pills due to difficulty sleeping?",
         "Adakah anda mengambil pil tidur akibat kesukaran tidur?"),
    ),
    scale_options=SEGIST_SCALE,
    scoring_ranges=_ranges(
        (0, 12, "Low", "Rendah"),
        (13, 23, "Moderate", "Sederhana"),
        (24, 36, "High", "Tinggi"),
        (37, 44, "Very High", "Sangat Tinggi"),
    ),
    max_score=44,
    is_premium=True,
    timeframe="Please answer the following questions about your sleep:",
    timeframe_localized="Sila jawab soalan berikut tentang tidur anda:",
)

OCD = Instrument(
    type="ocd",
    name="OCD Screening Tool - Malaysia",
    name_localized="Alat Saringan OCD - Malaysia",
    questions=_questions(
        ("ocd_1", "Do you experience recurrent and persistent thoughts, impulses, or images?",
         "Adakah anda mempunyai pemikiran, impuls atau imej yang meresahkan atau merisaukan "
         "yang berulang dan berterusan?"),
        ("ocd_2", "Do the thoughts, impulses, or images come from your own mind?",
         "Adakah pemikiran, impuls atau imej tersebut datang daripada minda anda sendiri?"),
        ("ocd_3", "Do the thoughts, impulses, or images cause you to feel very anxious or distressed?",
         "Adakah pemikiran, impuls atau imej tersebut menyebabkan anda berasa cemas atau bermasalah?"),
        ("ocd_4", "Do the thoughts, impulses, or images seem intrusive and inappropriate?",
         "Adakah pemikiran, impuls atau imej tersebut seolah-olah tidak sesuai dan menganggu "
         "fikiran anda?"),
        ("ocd_5", "Do you try to ignore or suppress the thoughts, impulses, or images?",
         "Adakah anda rasa anda tidak boleh berhenti atau tidak menghiraukan pemikiran atau imej "
         "ini walaupun anda telah mencuba?"),
        ("ocd_6", "Do you engage in repetitive behaviors (e.g., hand washing, ordering, checking)?",
         "Adakah anda melakukan perkara berulang kali seperti membilang, memeriksa, membasuh "
         "tangan, menyusun objek?"),
        ("ocd_7", "Do you feel driven to perform the repetitive behaviors in response to an obsession?",
         "Adakah perbuatan melakukan sesuatu perkara berulang kali merupakan tindak balas "
         "terhadap obsesi?"),
        ("ocd_8", "Are the behaviors aimed at preventing or reducing distress?",
         "Adakah perbuatan melakukan sesuatu perkara berulang kali bertujuan untuk mencegah atau "
         "mengurangkan perasaan cemas?"),
        ("ocd_9", "Are the behaviors or mental acts excessive or unreasonable?",
         "Adakah perbuatan melakukan sesuatu perkara berulang kali kelihatan terlalu berlebihan "
         "dan tidak munasabah?"),
        ("ocd_10", "Do you worry excessively about dirt, germs, or chemicals?",
         "Adakah anda bimbang berlebihan tentang kotoran, kuman, atau bahan kimia?"),
        ("ocd_11", "Are you constantly worried that something bad will happen because you forgot "
                   "something important?",
         "Adakah anda sentiasa bimbang bahawa sesuatu yang buruk akan berlaku kerana anda terlupa "
         "sesuatu yang penting?"),
        ("ocd_12", "Do you experience shortness of breath?", "Adakah anda mengalami sesak nafas?"),
        ("ocd_13", "Are you always afraid you will lose something of importance?",
         "Adakah anda sentiasa takut anda akan kehilangan sesuatu yang penting?"),
        ("ocd_14", "Do you wash yourself or things around you excessively?",
         "Adakah anda membersihkan diri anda atau mencuci benda-benda di sekeliling anda secara "
         "berlebihan?"),
        ("ocd_15", "Do you keep many useless things because you feel that you cannot throw them away?",
         "Adakah anda menyimpan barang yang sia-sia kerana anda merasakan bahawa anda tidak boleh "
         "membuangnya?"),
        ("ocd_16", "Have you experienced changes in sleeping or eating habits?",
         "Adakah anda mempunyai perubahan dari segi tabiat tidur dan tabiat makan?"),
        ("ocd_17", "Do you have to act or speak aggressively even though you really do not want to?",
         "Adakah anda perlu bertindak atau bercakap secara agresif meskipun anda tidak berniat "
         "untuk bertindak sebegitu?"),
        ("ocd_18", "More days than not, do you feel sad or depressed?",
         "Kebanyakan harinya, adakah anda merasa sedih atau tertekan?"),
        ("ocd_19", "More days than not, do you feel disinterested in life?",
         "Kebanyakan harinya, adakah anda merasa tidak atau kurang berminat terhadap soal kehidupan?"),
        ("ocd_20", "More days than not, do you feel worthless or guilty?",
         "Kebanyakan harinya, adakah anda merasa tidak berharga atau bersalah?"),
    ),
    scale_options=OCD_SCALE,
    scoring_ranges=_ranges(
        (0, 20, "Low", "Rendah"),
        (21, 40, "Moderate", "Sederhana"),
        (41, 60, "High", "Tinggi"),
        (61, 80, "Very High", "Sangat Tinggi"),
    ),
    max_score=80,
    is_premium=True,
    timeframe="During the past month, please indicate how much each statement applies to you:",
    timeframe_localized="Dalam sebulan yang lepas, sila nyatakan sejauh mana setiap pernyataan "
                        "berkaitan dengan anda:",
)

PTSD = Instrument(
    type="ptsd",
    name="PTSD Checklist - Malaysia",
    name_localized="Senarai Semak PTSD",
    questions=_questions(
        ("ptsd_1", "Having disturbing and recurrent memories, thoughts or images of a stressful experience",
         "Mempunyai gangguan dan ulangan ingatan, pemikiran atau gambaran pengalaman lampau yang tertekan"),
        ("ptsd_2", "Having disturbing and recurrent dreams related to a stressful experience",
         "Mempunyai gangguan dan ulangan mimpi-mimpi berkaitan dengan pengalaman lampau yang tertekan"),
        ("ptsd_3", "Suddenly acting or feeling as if the stressful experience is happening again",
         "Tiba-tiba berkelakuan atau merasakan seolah-olah pengalaman tertekan berlaku lagi"),
        ("ptsd_4", "Feeling very upset when something reminds you of a stressful experience",
         "Rasa sangat kecewa/marah apabila ada sesuatu yang mengingatkan anda tentang pengalaman "
         "lampau yang tertekan"),
        ("ptsd_5", "Having physical reactions when reminded of a stressful experience",
         "Mempunyai reaksi fizikal (seperti berdebar, sesak nafas, berpeluh) apabila ada sesuatu "
         "yang mengingatkan anda"),
        ("ptsd_6", "Avoiding thinking or talking about a stressful experience",
         "Mengelak daripada berfikir atau bercakap tentang pengalaman lampau yang tertekan"),
        ("ptsd_7", "Avoiding activities or situations that remind you of a stressful experience",
         "Mengelakkan aktiviti atau situasi yang mengingatkan anda tentang pengalaman lampau yang "
         "tertekan"),
        ("ptsd_8", "Difficulty remembering important events from a stressful experience",
         "Sukar untuk ingat kembali peristiwa-peristiwa penting daripada pengalaman lampau yang "
         "tertekan"),
        ("ptsd_9", "Loss of interest in things you used to enjoy",
         "Hilang minat terhadap perkara yang pernah anda nikmati"),
        ("ptsd_10", "Feeling distant and isolated from others",
         "Rasa terasing dan tersisih daripada orang lain"),
        ("ptsd_11", "Feeling emotionally numb or unable to love those close to you",
         "Rasa hambar secara emosi atau tidak mampu untuk menyayangi individu yang rapat dengan anda"),
        ("ptsd_12", "Feeling as if your future is bleak", "Rasa seolah masa depan anda kelam"),
        ("ptsd_13", "Difficulty falling or staying asleep", "Sukar untuk terlelap atau tidur dengan nyenyak"),
        ("ptsd_14", "Feeling irritable or having angry outbursts", "Rasa berang atau cepat marah"),
        ("ptsd_15", "Difficulty concentrating", "Sukar untuk tumpukan perhatian"),
        ("ptsd_16", "Being very vigilant or on guard", "Menjadi sangat berjaga-jaga"),
        ("ptsd_17", "Being easily startled or losing morale", "Mudah terkejut atau hilang semangat"),
        ("ptsd_18", "Physical and emotional stress when exposed to reminders of stressful experience",
         "Tekanan fizikal dan emosi apabila terdedah dengan perkara yang mengingatkan pengalaman "
         "lampau yang tertekan"),
        ("ptsd_19", "Avoiding places or people that remind you of stressful experience",
         "Mengelak daripada tempat atau individu yang mengingatkan pengalaman lampau yang tertekan"),
        ("ptsd_20", "Affected responsibility in completing daily tasks (work or study)",
         "Terjejas tanggung jawab dalam menyempurkan tugas harian (kerja atau belajar)"),
    ),
    scale_options=PTSD_SCALE,
    scoring_ranges=_ranges(
        (0, 32, "Low Risk", "Risiko Rendah"),
        (33, 50, "Moderate Risk", "Risiko Sederhana"),
        (51, 65, "High Risk", "Risiko Tinggi"),
        (66, 80, "Severe", "Teruk"),
    ),
    max_score=80,
    is_premium=True,
    timeframe="Please indicate how much you have been bothered by these difficulties in the "
              "past few months:",
    timeframe_localized="Sila nyatakan setakat mana anda terganggu oleh kesukaran-kesukaran di "
                        "bawah sejak beberapa bulan yang lalu:",
)

# YSAS: items 1-5 form the ideation subscale, items 6-10 the attempt subscale
SUICIDAL = Instrument(
    type="suicidal",
    name="YSAS - Suicide Attitude Scale",
    name_localized="Skala Sikap Bunuh Diri YSAS",
    questions=_questions(
        ("ysas_1", "I have no desire to continue living",
         "Saya tidak ada keinginan untuk meneruskan kehidupan ini"),
        ("ysas_2", "I feel there is no reason for me to continue living",
         "Saya merasakan tidak ada sebab untuk saya terus hidup"),
        ("ysas_3", "Thoughts of ending my life cross my mind when facing major problems",
         "Terlintas dalam fikiran saya untuk menamatkan hidup ini apabila berhadapan dengan "
         "masalah yang besar"),
        ("ysas_4", "I have thought about ending my life", "Saya pernah terfikir untuk menamatkan hidup saya"),
        ("ysas_5", "Thoughts of ending my life cross my mind but I am afraid to do it",
         "Terlintas dalam fikiran saya untuk menamatkan hidup saya namun saya takut untuk melakukannya"),
        ("ysas_6", "I have harmed myself with the intention of ending my life",
         "Saya pernah mencederakan diri sendiri dengan tujuan untuk menamatkan hidup saya"),
        ("ysas_7", "I have used certain methods to end my life",
         "Saya pernah menggunakan kaedah tertentu untuk menamatkan hidup saya"),
        ("ysas_8", "I have attempted to end my life but stopped when I remembered something "
                   "(loved ones, sin, etc.)",
         "Saya pernah melakukan percubaan untuk menamatkan hidup saya tetapi menghentikannya apabila "
         "teringat tentang sesuatu (orang tersayang, dosa dll)"),
        ("ysas_9", "I have tried to end my life but was unsuccessful",
         "Saya pernah mencuba untuk menamatkan hidup ini tetapi tidak berhasil"),
        ("ysas_10", "I have tried to end my life but actually did not want to die",
         "Saya pernah mencuba menamatkan hidup saya tetapi sebenarnya saya tidak berkeinginan untuk mati"),
    ),
    scale_options=YSAS_SCALE,
    scoring_ranges=_ranges(
        (0, 7, "Low Risk", "Risiko Rendah"),
        (8, 15, "Moderate Risk - Ideation Present", "Risiko Sederhana - Ideasi Hadir"),
        (16, 25, "High Risk", "Risiko Tinggi"),
        (26, 40, "Very High Risk - Seek Help Immediately",
         "Risiko Sangat Tinggi - Dapatkan Bantuan Segera"),
    ),
    max_score=40,
    is_premium=False,
    timeframe="Please indicate how often you have experienced the following:",
    timeframe_localized="Sila bulatkan pernyataan yang menggambarkan situasi anda:",
)

PSYCHOSIS = Instrument(
    type="psychosis",
    name="Psychosis Screening",
    name_localized="Saringan Psikosis",
    questions=_questions(
        ("psy_1", "Do you sometimes feel that people are talking about you or taking special notice of you?",
         "Adakah anda kadang-kadang berasa orang sedang bercakap tentang anda atau memberi perhatian "
         "khusus kepada anda?"),
        ("psy_2", "Do you sometimes feel that you are being watched or followed?",
         "Adakah anda kadang-kadang berasa anda sedang diperhatikan atau diikuti?"),
        ("psy_3", "Have you had experiences with telepathy, psychic forces, or fortune telling?",
         "Adakah anda mempunyai pengalaman dengan telepati, kuasa psikik, atau ramalan nasib?"),
        ("psy_4", "Do you hear voices that others cannot hear?",
         "Adakah anda mendengar suara yang orang lain tidak dapat dengar?"),
        ("psy_5", "Do you sometimes see things that others cannot see?",
         "Adakah anda kadang-kadang melihat perkara yang orang lain tidak dapat lihat?"),
        ("psy_6", "Do you feel you have special powers or abilities?",
         "Adakah anda berasa anda mempunyai kuasa atau kebolehan istimewa?"),
    ),
    scale_options=MY_FREQUENCY_SCALE,
    scoring_ranges=_ranges(
        (0, 6, "Minimal", "Minimum"),
        (7, 12, "Mild", "Ringan"),
        (13, 18, "Moderate", "Sederhana"),
        (19, 24, "Severe", "Teruk"),
    ),
    max_score=24,
    is_premium=True,
    timeframe="Please indicate how often you have experienced the following in the past year:",
    timeframe_localized="Sila nyatakan berapa kerap anda mengalami perkara berikut dalam setahun "
                        "yang lepas:",
)

SEXUAL_ADDICTION = Instrument(
    type="sexual_addiction",
    name="Sexual Behavior Screening",
    name_localized="Saringan Tingkah Laku Seksual",
    questions=_questions(
        ("sex_1", "Do you often find yourself preoccupied with sexual thoughts?",
         "Adakah anda sering mendapati diri anda asyik dengan fikiran seksual?"),
        ("sex_2", "Do you hide some of your sexual behavior from others?",
         "Adakah anda menyembunyikan sebahagian tingkah laku seksual anda daripada orang lain?"),
        ("sex_3", "Have you ever felt that your sexual behavior was out of control?",
         "Adakah anda pernah berasa tingkah laku seksual anda di luar kawalan?"),
        ("sex_4", "Do you use sexual behavior to escape, relieve anxiety, or cope with problems?",
         "Adakah anda menggunakan tingkah laku seksual untuk melarikan diri, melegakan kebimbangan, "
         "atau mengatasi masalah?"),
        ("sex_5", "Has your sexual behavior ever created problems in your relationships?",
         "Adakah tingkah laku seksual anda pernah mencipta masalah dalam hubungan anda?"),
    ),
    scale_options=MY_FREQUENCY_SCALE,
    scoring_ranges=_ranges(
        (0, 5, "Minimal", "Minimum"),
        (6, 10, "Mild", "Ringan"),
        (11, 15, "Moderate", "Sederhana"),
        (16, 20, "Severe", "Teruk"),
    ),
    max_score=20,
    is_premium=True,
    timeframe="In the past 6 months...",
    timeframe_localized="Dalam 6 bulan yang lepas...",
)

MARITAL_DISTRESS = Instrument(
    type="marital_distress",
    name="Marital Distress Questionnaire",
    name_localized="Soal Selidik Kesukaran Dalam Perkahwinan",
    questions=_questions(
        ("mar_1", "Handling family finances", "Menguruskan kewangan keluarga"),
        ("mar_2", "Ways of dealing with children", "Cara mendidik/membesarkan anak"),
        ("mar_3", "Demonstration of affection", "Cara menunjukkan kemesraan"),
        ("mar_4", "Sexual relationship", "Hubungan seksual"),
        ("mar_5", "Making major decisions", "Membuat keputusan"),
        ("mar_6", "Managing household tasks", "Menguruskan kerja rumah"),
        ("mar_7", "Marriage overall satisfaction", "Kepuasan perkahwinan secara keseluruhan"),
        ("mar_8", "Relationship with partner", "Perhubungan/kemesraan dengan pasangan"),
        ("mar_9", "My partner is too critical or often has negative outlook",
         "Pasangan saya terlalu kritikal atau sering mempunyai pandangan yang negatif"),
        ("mar_10", "Sometimes I am concerned about my partner's temper",
         "Kadang-kadang saya bimbang mengenai panas baran pasangan saya"),
    ),
    scale_options=AGREEMENT_SCALE,
    scoring_ranges=_ranges(
        (0, 12, "Low Distress", "Tekanan Rendah"),
        (13, 25, "Moderate Distress", "Tekanan Sederhana"),
        (26, 38, "High Distress", "Tekanan Tinggi"),
        (39, 50, "Very High Distress", "Tekanan Sangat Tinggi"),
    ),
    max_score=50,
    is_premium=True,
    timeframe="Thinking about your relationship, please indicate the level of "
              "agreement/disagreement with your partner:",
    timeframe_localized="Memikirkan hubungan anda, sila nyatakan tahap persetujuan/perselisihan "
                        "dengan pasangan anda:",
)


INSTRUMENTS: Dict[str, Instrument] = {
    i.type: i
    for i in (
        DEPRESSION,
        ANXIETY,
        INSOMNIA,
        OCD,
        PTSD,
        SUICIDAL,
        PSYCHOSIS,
        SEXUAL_ADDICTION,
        MARITAL_DISTRESS,
    )
}

# Display names used in summaries and prompts
ASSESSMENT_TYPE_INFO: Dict[str, Tuple[str, str]] = {
    "depression": ("Depression", "Kemurungan"),
    "anxiety": ("Anxiety", "Kebimbangan"),
    "ocd": ("OCD", "OCD"),
    "ptsd": ("PTSD", "PTSD"),
    "insomnia": ("Insomnia", "Insomnia"),
    "suicidal": ("Suicidal Ideation", "Pemikiran Bunuh Diri"),
    "psychosis": ("Psychosis", "Psikosis"),
    "sexual_addiction": ("Sexual Addiction", "Ketagihan Seksual"),
    "marital_distress": ("Marital Distress", "Tekanan Perkahwinan"),
}


def get_instrument(instrument_type: str) -> Optional[Instrument]:
    """Look up an instrument by type; None when unknown."""
    return INSTRUMENTS.get(instrument_type)


def display_name(assessment_type: str) -> Tuple[str, str]:
    """English and Malay display names, falling back to a title-cased type."""
    if assessment_type in ASSESSMENT_TYPE_INFO:
        return ASSESSMENT_TYPE_INFO[assessment_type]
    fallback = (assessment_type or "assessment").replace("_", " ").title()
    return fallback, fallback
