"""Prioritized keyword rule tables and the matching engine over them.

Each category is an ordered list of ``(token, patterns)`` entries. A
category contributes the token of its first matching entry, unless it is
marked ``collect_all``. ``specific_first`` categories try their patterns
longest-first across all entries, so a compound term such as
``maxi-dress`` wins over a shorter generic one.

Pattern semantics:

* patterns containing CJK ideographs match anywhere (no word boundaries
  in CJK text);
* Latin patterns match whole words, allowing a plural ``s``/``es``;
  a ``-`` or ``_`` inside a pattern matches any separator or none.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Sequence, Tuple

Entry = Tuple[str, Tuple[str, ...]]

_CJK = re.compile(r"[\u4e00-\u9fff]")
_PATTERN_SEPARATOR = re.compile(r"[-_ ]")


@dataclass(frozen=True)
class RuleCategory:
    """One classifier grouping (color, material, garment, ...)."""

    category_id: str
    entries: Tuple[Entry, ...]
    collect_all: bool = False
    specific_first: bool = False

    @property
    def tokens(self) -> Tuple[str, ...]:
        return tuple(token for token, _ in self.entries)


@lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> "re.Pattern[str]":
    """Compile a rule pattern into a regex over a cleaned, lower-case name."""
    pattern = pattern.lower()
    if _CJK.search(pattern):
        return re.compile(re.escape(pattern))
    body = r"[-_\s]?".join(
        re.escape(part) for part in _PATTERN_SEPARATOR.split(pattern) if part
    )
    return re.compile(rf"(?<![a-z0-9]){body}(?:e?s)?(?![a-z0-9])")


def match_category(name: str, category: RuleCategory) -> List[str]:
    """Tokens contributed by one category for a cleaned file name."""
    if category.specific_first:
        candidates = sorted(
            (
                (token, pattern)
                for token, patterns in category.entries
                for pattern in patterns
            ),
            key=lambda candidate: len(candidate[1]),
            reverse=True,
        )
        for token, pattern in candidates:
            if compile_pattern(pattern).search(name):
                return [token]
        return []

    matched: List[str] = []
    for token, patterns in category.entries:
        if any(compile_pattern(pattern).search(name) for pattern in patterns):
            if not category.collect_all:
                return [token]
            if token not in matched:
                matched.append(token)
    return matched


def match_rules(
    name: str, categories: Sequence[RuleCategory] = ()
) -> List[str]:
    """Apply every category in order; tokens keep category order."""
    tokens: List[str] = []
    for category in categories or CATEGORY_RULES:
        tokens.extend(match_category(name, category))
    return tokens


COLOR = RuleCategory(
    "color",
    (
        ("red", ("红", "红色", "赤", "朱红", "绯红", "red", "crimson", "scarlet", "burgundy", "maroon")),
        ("blue", ("蓝", "蓝色", "湛蓝", "天蓝", "宝蓝", "blue", "navy", "royal", "sky", "azure", "cyan")),
        ("green", ("绿", "绿色", "翠绿", "墨绿", "草绿", "green", "emerald", "mint", "lime", "olive", "forest")),
        ("yellow", ("黄", "黄色", "金黄", "橙黄", "柠檬黄", "yellow", "golden", "amber", "lemon", "mustard")),
        ("black", ("黑", "黑色", "玄", "墨黑", "乌黑", "black", "ebony", "charcoal", "onyx")),
        ("white", ("白", "白色", "纯白", "象牙白", "雪白", "white", "ivory", "pearl", "cream", "off-white")),
        ("gray", ("灰", "灰色", "炭灰", "银灰", "浅灰", "gray", "grey", "slate", "ash")),
        ("pink", ("粉", "粉色", "桃红", "玫红", "粉红", "pink", "rose", "coral", "salmon", "blush")),
        ("purple", ("紫", "紫色", "紫罗兰", "薰衣草", "purple", "violet", "lavender", "plum", "mauve")),
        ("orange", ("橙", "橙色", "橘色", "橘红", "orange", "tangerine", "peach", "apricot")),
        ("brown", ("棕", "棕色", "褐色", "咖啡色", "卡其", "brown", "tan", "khaki", "camel", "chocolate")),
        ("beige", ("米色", "米白", "杏色", "beige", "nude", "sand", "taupe")),
        ("gold", ("金", "金色", "黄金", "金属色", "gold", "metallic")),
        ("silver", ("银", "银色", "金属银", "silver", "platinum")),
        ("multicolor", ("彩", "多彩", "拼色", "渐变", "花色", "multicolor", "colorful", "rainbow", "print", "pattern")),
    ),
)

MATERIAL = RuleCategory(
    "material",
    (
        ("leather", ("皮", "皮革", "真皮", "牛皮", "羊皮", "leather", "genuine-leather", "suede", "nappa")),
        ("canvas", ("帆布", "canvas", "duck-canvas")),
        ("cotton", ("棉", "纯棉", "棉质", "cotton", "organic-cotton", "pima-cotton")),
        ("silk", ("丝", "丝绸", "真丝", "缎面", "silk", "satin", "chiffon")),
        ("wool", ("羊毛", "毛", "绒", "wool", "cashmere", "merino", "alpaca")),
        ("denim", ("丹宁", "牛仔布", "denim", "jean")),
        ("linen", ("亚麻", "麻", "linen")),
        ("velvet", ("天鹅绒", "绒布", "velvet", "velour")),
        ("lace", ("蕾丝", "镂空", "lace")),
        ("knit", ("针织", "编织", "knit", "knitted", "sweater")),
        ("metal", ("金属", "合金", "不锈钢", "metal", "stainless-steel", "aluminum", "brass")),
        ("wood", ("木", "木质", "实木", "wood", "wooden", "bamboo", "oak", "walnut")),
        ("ceramic", ("陶瓷", "瓷", "ceramic", "porcelain")),
        ("glass", ("玻璃", "钢化玻璃", "glass", "crystal")),
        ("plastic", ("塑料", "塑胶", "plastic", "pvc", "acrylic")),
        ("rubber", ("橡胶", "rubber", "silicone")),
        ("carbon-fiber", ("碳纤维", "carbon-fiber", "carbon")),
        ("fabric", ("布料", "fabric", "textile", "cloth")),
    ),
)

STYLE = RuleCategory(
    "style",
    (
        ("casual", ("休闲", "日常", "随性", "casual")),
        ("formal", ("正式", "商务", "职场", "formal")),
        ("vintage", ("复古", "怀旧", "vintage", "retro")),
        ("minimalist", ("简约", "极简", "简单", "minimalist", "minimal")),
        ("luxury", ("奢华", "豪华", "奢侈", "高端", "luxury")),
        ("cute", ("可爱", "萌", "甜美", "cute")),
        ("elegant", ("优雅", "典雅", "elegant")),
        ("sport", ("运动", "活力", "户外", "sporty", "athletic")),
        ("classic", ("经典", "经典款", "classic")),
        ("modern", ("现代", "潮流", "时尚", "modern")),
        ("bohemian", ("波西米亚", "波西米亚风", "bohemian", "boho")),
        ("preppy", ("学院", "学院风", "preppy")),
        ("street", ("街头", "街头风", "streetwear")),
    ),
)

GARMENT = RuleCategory(
    "garment",
    (
        ("dress", ("连衣裙", "裙装", "礼服裙", "晚礼服", "婚纱裙", "tea-dress", "maxi-dress", "midi-dress", "mini-dress", "cocktail-dress", "dress", "gown")),
        ("skirt", ("半身裙", "短裙", "长裙", "a字裙", "百褶裙", "包臀裙", "skirt", "pencil-skirt", "a-line-skirt", "pleated-skirt")),
        ("pants", ("裤子", "长裤", "休闲裤", "直筒裤", "阔腿裤", "小脚裤", "pants", "trousers", "slacks", "wide-leg-pants")),
        ("jeans", ("牛仔裤", "丹宁", "denim", "jeans", "jean", "denim-pants")),
        ("shorts", ("短裤", "热裤", "shorts", "bermuda-shorts", "cargo-shorts")),
        ("t-shirt", ("t恤", "tshirt", "t-shirt", "短袖", "体恤", "tee", "tank-top", "sleeveless")),
        ("shirt", ("衬衫", "长袖", "top", "上衣", "shirt", "button-down", "button-up", "oxford-shirt")),
        ("blouse", ("女衫", "女士衬衫", "雪纺衫", "blouse", "chiffon-blouse")),
        ("sweater", ("毛衣", "针织衫", "pullover", "sweater", "knit-sweater", "cardigan-sweater")),
        ("hoodie", ("卫衣", "连帽衫", "套头衫", "hoodie", "hooded-sweatshirt", "sweatshirt")),
        ("cardigan", ("开衫", "开襟衫", "cardigan")),
        ("jacket", ("夹克", "外套", "短外套", "jacket", "bomber-jacket", "denim-jacket", "leather-jacket")),
        ("coat", ("大衣", "风衣", "毛呢大衣", "羊毛大衣", "coat", "trench-coat", "wool-coat", "overcoat")),
        ("blazer", ("西装外套", "小西装", "blazer", "sport-coat")),
        ("suit", ("西装", "套装", "正装", "suit", "business-suit", "formal-suit")),
        ("vest", ("背心", "马甲", "vest", "waistcoat")),
        ("jumpsuit", ("连体裤", "连身衣", "jumpsuit", "onesie")),
        ("romper", ("连体短裤", "romper")),
        ("leggings", ("打底裤", "leggings", "yoga-pants")),
        ("sweatpants", ("运动裤", "sweatpants", "joggers")),
        ("pajamas", ("睡衣", "pajamas", "pjs", "sleepwear")),
    ),
    specific_first=True,
)

FOOTWEAR = RuleCategory(
    "footwear",
    (
        ("running-shoes", ("跑鞋", "跑步鞋", "慢跑鞋", "running-shoes", "running-shoe")),
        ("canvas-shoes", ("帆布鞋", "canvas-shoes")),
        ("sneakers", ("运动鞋", "休闲鞋", "板鞋", "sneaker", "trainer")),
        ("ankle-boots", ("踝靴", "ankle-boots", "ankle-boot")),
        ("boots", ("靴子", "靴", "长靴", "短靴", "马丁靴", "切尔西靴", "boots", "boot", "snow-boots")),
        ("stilettos", ("细高跟", "细跟", "stilettos")),
        ("heels", ("高跟鞋", "高跟", "heels", "high-heels", "stiletto", "pumps")),
        ("flats", ("平底鞋", "平底", "flats", "ballet")),
        ("sandals", ("凉鞋", "sandals", "sandal")),
        ("slippers", ("拖鞋", "slippers", "slipper")),
        ("loafers", ("乐福鞋", "豆豆鞋", "loafer")),
        ("oxfords", ("牛津鞋", "oxfords", "oxford-shoes")),
        ("derby", ("德比鞋", "derby-shoes")),
    ),
)

BAGS = RuleCategory(
    "bags",
    (
        ("handbag", ("手提包", "拎包", "handbag")),
        ("shoulder-bag", ("单肩包", "肩包", "shoulder-bag")),
        ("crossbody-bag", ("斜挎包", "跨包", "crossbody", "crossbody-bag")),
        ("backpack", ("双肩包", "背包", "书包", "backpack")),
        ("tote-bag", ("托特包", "大容量包", "tote")),
        ("clutch", ("手拿包", "晚宴包", "clutch")),
        ("wallet", ("钱包", "皮夹", "长款钱包", "短款钱包", "wallet")),
        ("purse", ("零钱包", "小包", "purse")),
        ("belt-bag", ("腰包", "胸包", "belt-bag", "fanny-pack")),
        ("messenger-bag", ("邮差包", "信使包", "messenger-bag")),
    ),
)

JEWELRY = RuleCategory(
    "jewelry",
    (
        ("necklace", ("项链", "吊坠", "necklace", "pendant", "chain")),
        ("choker", ("颈链", "choker")),
        ("drop-earrings", ("耳坠", "长耳环", "drop-earring")),
        ("earrings", ("耳环", "耳钉", "earring", "stud")),
        ("bracelet", ("手链", "手镯", "bracelet")),
        ("bangle", ("硬手镯", "bangle")),
        ("ring", ("戒指", "指环", "ring", "wedding-ring", "engagement-ring")),
        ("brooch", ("胸针", "胸花", "brooch")),
        ("watch", ("手表", "腕表", "watch", "wristwatch")),
        ("anklet", ("脚链", "anklet")),
    ),
)

ACCESSORIES = RuleCategory(
    "accessories",
    (
        ("belt", ("腰带", "皮带", "belt")),
        ("scarf", ("围巾", "丝巾", "羊绒围巾", "scarf", "scarves")),
        ("beanie", ("针织帽", "冷帽", "毛线帽", "beanie")),
        ("hat", ("帽子", "鸭舌帽", "礼帽", "hat", "cap")),
        ("gloves", ("手套", "皮手套", "针织手套", "glove")),
        ("sunglasses", ("太阳镜", "墨镜", "sunglasses")),
        ("eyeglasses", ("眼镜", "光学镜", "eyeglasses", "frame")),
        ("bow-tie", ("领结", "bow-tie", "bowtie")),
        ("tie", ("领带", "tie", "necktie")),
        ("hair-accessory", ("发饰", "发夹", "发箍", "hair-clip", "headband", "scrunchie")),
    ),
)

ELECTRONICS = RuleCategory(
    "electronics",
    (
        ("smartwatch", ("智能手表", "智能手环", "smartwatch", "smart-watch")),
        ("case", ("手机壳", "保护壳", "phone-case", "case", "cover")),
        ("smartphone", ("智能手机", "手机", "smartphone", "iphone", "android")),
        ("laptop", ("笔记本电脑", "笔记本", "laptop", "macbook", "notebook")),
        ("tablet", ("平板电脑", "平板", "ipad", "tablet")),
        ("earbuds", ("入耳式耳机", "耳塞", "earbuds", "airpods")),
        ("headphones", ("头戴式耳机", "耳机", "headphones", "headphone", "over-ear")),
        ("speaker", ("音箱", "扬声器", "音响", "蓝牙音箱", "speaker")),
        ("camera", ("相机", "摄像机", "单反", "微单", "camera", "dslr")),
        ("keyboard", ("键盘", "机械键盘", "keyboard")),
        ("mouse", ("鼠标", "无线鼠标", "mouse")),
        ("charger", ("充电器", "充电头", "charger")),
        ("cable", ("数据线", "充电线", "连接线", "cable")),
    ),
)

HOME_APPLIANCES = RuleCategory(
    "home-appliances",
    (
        ("coffee-maker", ("咖啡机", "咖啡壶", "espresso", "coffee-maker", "coffee-machine")),
        ("coffee-grinder", ("磨豆机", "研磨机", "磨咖啡", "coffee-grinder", "grinder")),
        ("kettle", ("电水壶", "烧水壶", "水壶", "kettle")),
        ("blender", ("搅拌机", "榨汁机", "破壁机", "blender", "juicer")),
        ("toaster", ("烤面包机", "多士炉", "toaster")),
        ("microwave", ("微波炉", "microwave")),
        ("air-fryer", ("空气炸锅", "炸锅", "air-fryer")),
        ("rice-cooker", ("电饭煲", "电饭锅", "rice-cooker")),
        ("mixer", ("厨师机", "和面机", "stand-mixer", "mixer")),
        ("vacuum", ("吸尘器", "扫地机", "vacuum")),
        ("lamp", ("台灯", "落地灯", "吊灯", "灯具", "lamp")),
        ("bulb", ("灯泡", "照明", "bulb")),
        ("fan", ("风扇", "电风扇", "台扇", "fan")),
        ("heater", ("取暖器", "电暖器", "heater")),
        ("dehumidifier", ("除湿机", "dehumidifier")),
        ("humidifier", ("加湿器", "humidifier")),
        ("purifier", ("净化器", "空气净化器", "purifier")),
    ),
    collect_all=True,
)

FURNITURE = RuleCategory(
    "furniture",
    (
        ("sofa", ("沙发", "真皮沙发", "布艺沙发", "sofa", "couch")),
        ("chair", ("椅子", "餐椅", "办公椅", "休闲椅", "chair", "armchair")),
        ("table", ("桌子", "餐桌", "茶几", "table", "coffee-table")),
        ("desk", ("书桌", "办公桌", "写字台", "desk")),
        ("mattress", ("床垫", "弹簧床垫", "mattress")),
        ("bed", ("床", "双人床", "单人床", "床架", "bed", "bed-frame")),
        ("cabinet", ("柜子", "储物柜", "电视柜", "cabinet", "sideboard")),
        ("shelf", ("架子", "书架", "置物架", "shelf", "bookshelf", "shelves")),
        ("wardrobe", ("衣柜", "衣橱", "wardrobe")),
        ("drawer", ("抽屉", "床头柜", "drawer", "nightstand")),
    ),
)

KITCHENWARE = RuleCategory(
    "kitchenware",
    (
        ("cookware", ("锅具", "炒锅", "汤锅", "平底锅", "cookware", "frying-pan", "skillet", "wok")),
        ("knife", ("刀具", "菜刀", "knife", "knives", "chef-knife")),
        ("cutting-board", ("砧板", "切菜板", "cutting-board", "chopping-board")),
        ("dinnerware", ("餐具", "碗碟", "盘子", "dinnerware", "plate", "bowl")),
        ("flatware", ("刀叉", "勺子", "flatware", "cutlery", "spoon", "fork")),
        ("glassware", ("玻璃杯", "水杯", "酒杯", "glassware", "wine-glass", "tumbler")),
        ("storage", ("收纳盒", "保鲜盒", "储物罐", "storage-box", "container")),
    ),
)

BEAUTY = RuleCategory(
    "beauty",
    (
        ("foundation", ("粉底液", "粉底", "底妆", "foundation")),
        ("lipstick", ("口红", "唇膏", "lipstick", "liquid-lipstick")),
        ("lip-gloss", ("唇釉", "唇蜜", "lip-gloss")),
        ("mascara", ("睫毛膏", "mascara")),
        ("eyeliner", ("眼线笔", "眼线", "eyeliner")),
        ("eyeshadow", ("眼影", "eyeshadow", "palette")),
        ("serum", ("精华液", "精华", "serum")),
        ("moisturizer", ("面霜", "乳液", "保湿霜", "moisturizer", "cream-jar")),
        ("cleanser", ("洁面", "洗面奶", "洁面乳", "cleanser", "face-wash")),
        ("toner", ("爽肤水", "化妆水", "toner")),
        ("mask", ("面膜", "face-mask", "sheet-mask")),
        ("perfume", ("香水", "perfume", "fragrance", "cologne")),
        ("makeup-brush", ("化妆刷", "美妆蛋", "makeup-brush", "beauty-blender")),
        ("skincare", ("护肤", "护肤品", "护肤套装", "skincare")),
    ),
)

SPORTS = RuleCategory(
    "sports",
    (
        ("yoga-mat", ("瑜伽垫", "健身垫", "yoga-mat")),
        ("dumbbell", ("哑铃", "壶铃", "dumbbell", "kettlebell")),
        ("resistance-band", ("弹力带", "拉力器", "resistance-band")),
        ("tent", ("帐篷", "露营帐篷", "tent")),
        ("sleeping-bag", ("睡袋", "sleeping-bag")),
        ("backpack", ("登山包", "旅行包", "hiking-backpack")),
        ("water-bottle", ("运动水壶", "water-bottle")),
    ),
)

BABY = RuleCategory(
    "baby",
    (
        ("diaper", ("尿布", "纸尿裤", "diaper", "nappy")),
        ("baby-clothes", ("童装", "婴儿装", "baby-clothes")),
        ("stroller", ("婴儿车", "推车", "stroller", "pram")),
        ("baby-carrier", ("婴儿背带", "腰凳", "baby-carrier")),
        ("baby-bottle", ("奶瓶", "baby-bottle")),
        ("pacifier", ("奶嘴", "安抚奶嘴", "pacifier")),
        ("toy", ("玩具", "益智玩具", "toy", "plush-toy")),
    ),
)

PET = RuleCategory(
    "pet",
    (
        ("pet-bed", ("宠物床", "猫窝", "狗窝", "pet-bed", "dog-bed", "cat-bed")),
        ("pet-food", ("宠物粮", "猫粮", "狗粮", "pet-food", "dog-food", "cat-food")),
        ("pet-toy", ("宠物玩具", "猫玩具", "狗玩具", "pet-toy", "dog-toy", "cat-toy")),
        ("leash", ("牵引绳", "狗绳", "leash")),
        ("collar", ("项圈", "pet-collar", "dog-collar")),
        ("litter-box", ("猫砂盆", "litter-box")),
    ),
)

SCENE = RuleCategory(
    "scene",
    (
        ("office", ("办公", "办公室", "office", "work")),
        ("home", ("家居", "家用", "home")),
        ("outdoor", ("户外", "旅行", "outdoor", "travel")),
        ("party", ("派对", "晚宴", "party")),
        ("wedding", ("婚礼", "婚庆", "wedding")),
        ("casual", ("日常", "休闲", "casual")),
        ("business", ("商务", "正式", "business")),
    ),
)

SEASON = RuleCategory(
    "season",
    (
        ("spring", ("春", "春季", "spring")),
        ("summer", ("夏", "夏季", "summer")),
        ("autumn", ("秋", "秋季", "autumn", "fall")),
        ("winter", ("冬", "冬季", "winter")),
        ("all-season", ("四季", "全年", "all-season")),
    ),
)

SIZE = RuleCategory(
    "size",
    (
        ("mini", ("迷你", "小型", "小号", "mini")),
        ("plus-size", ("加肥", "大码", "plus-size", "plus")),
        ("xlarge", ("特大", "加大", "xl", "xxl")),
        ("small", ("sm", "small")),
        ("medium", ("中号", "md", "medium")),
        ("large", ("大号", "lg", "large")),
        ("oversized", ("宽松", "大版型", "oversized")),
    ),
)

CATEGORY_RULES: Tuple[RuleCategory, ...] = (
    COLOR,
    MATERIAL,
    STYLE,
    GARMENT,
    FOOTWEAR,
    BAGS,
    JEWELRY,
    ACCESSORIES,
    ELECTRONICS,
    HOME_APPLIANCES,
    FURNITURE,
    KITCHENWARE,
    BEAUTY,
    SPORTS,
    BABY,
    PET,
    SCENE,
    SEASON,
    SIZE,
)

COLOR_TOKENS = frozenset(COLOR.tokens) | {"grey"}
MATERIAL_TOKENS = frozenset(MATERIAL.tokens)
STYLE_TOKENS = frozenset(STYLE.tokens)
